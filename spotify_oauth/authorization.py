"""OAuth authorization URL construction"""

from typing import Iterable
from urllib.parse import urlencode, urlparse, urlunparse, parse_qsl

from settings import SPOTIFY_AUTHORIZE_URL
from .pkce import PKCEManager

# Query parameters the identity provider appends on the way back
CALLBACK_PARAMS = ("code", "state", "error")


def build_authorize_url(
    client_id: str,
    redirect_uri: str,
    scopes: Iterable[str],
    code_challenge: str,
    authorize_url: str = SPOTIFY_AUTHORIZE_URL,
) -> str:
    """Construct the authorize URL the browser is sent to

    Only the challenge travels here; the verifier stays in local storage.
    """
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": " ".join(scopes),
        "code_challenge_method": "S256",
        "code_challenge": code_challenge,
    }
    return f"{authorize_url}?{urlencode(params)}"


def extract_callback_params(url: str) -> dict:
    """Parse a redirect URL and return its code/state/error parameters"""
    query = dict(parse_qsl(urlparse(url or "").query))
    return {key: query[key] for key in CALLBACK_PARAMS if query.get(key)}


def strip_callback_params(url: str) -> str:
    """Remove code/state/error from a URL so a reload cannot replay the code"""
    parsed = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k not in CALLBACK_PARAMS]
    return urlunparse(parsed._replace(query=urlencode(query)))


class AuthorizationURLBuilder:
    """Builds OAuth authorization URLs with PKCE"""

    def __init__(self, pkce_manager: PKCEManager, client_id: str, redirect_uri: str, scopes: Iterable[str]):
        self.pkce = pkce_manager
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)

    def get_authorize_url(self) -> str:
        """Generate a fresh verifier, persist it and construct the authorize URL

        Returns:
            Full authorization URL
        """
        codes = self.pkce.generate_pkce()
        # Save the verifier for the exchange after the redirect
        self.pkce.save_verifier(codes.code_verifier)
        return build_authorize_url(self.client_id, self.redirect_uri, self.scopes, codes.code_challenge)
