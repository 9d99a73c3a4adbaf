"""OAuth token exchange functionality"""

import logging
from typing import Any, Dict, Optional

import httpx

from errors import TokenExchangeError
from settings import SPOTIFY_TOKEN_URL, CONNECT_TIMEOUT, REQUEST_TIMEOUT
from .models import StoredAuth

logger = logging.getLogger(__name__)

MALFORMED_RESPONSE = "malformed token response"


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Best-effort human-readable error from a token endpoint response"""
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        detail = body.get("error_description") or body.get("error")
        if isinstance(detail, dict):
            detail = detail.get("message")
        if detail:
            return str(detail)
    return None


async def post_token_request(
    form: Dict[str, str],
    operation: str,
    token_url: str = SPOTIFY_TOKEN_URL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """POST a form-encoded request to the token endpoint

    Returns:
        The decoded body, guaranteed to carry an access_token and a numeric expires_in

    Raises:
        TokenExchangeError: On a non-2xx response or a 2xx body that is not a usable token
    """
    timeout = httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT)
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        response = await client.post(
            token_url,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    if not response.is_success:
        detail = _error_detail(response)
        logger.error(f"Token {operation} failed with status {response.status_code}: {detail}")
        raise TokenExchangeError(operation, response.status_code, detail)

    try:
        token_data = response.json()
        if not isinstance(token_data, dict) or not token_data.get("access_token"):
            raise ValueError("no access_token")
        int(token_data.get("expires_in", 3600))
    except (ValueError, TypeError) as e:
        logger.error(f"Token {operation} returned {response.status_code} with an unusable body: {e}")
        raise TokenExchangeError(operation, response.status_code, MALFORMED_RESPONSE) from None

    return token_data


async def exchange_code(
    code: str,
    code_verifier: str,
    client_id: str,
    redirect_uri: str,
    token_url: str = SPOTIFY_TOKEN_URL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> StoredAuth:
    """Exchange authorization code for tokens

    Args:
        code: Authorization code from the redirect
        code_verifier: The verifier whose challenge went out with the authorize request
        client_id: Spotify application client id
        redirect_uri: Must match the one used for authorization

    Returns:
        StoredAuth with the safety margin applied

    Raises:
        TokenExchangeError: If the identity provider rejects the exchange
    """
    token_data = await post_token_request(
        {
            "client_id": client_id,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "code_verifier": code_verifier,
        },
        "exchange",
        token_url=token_url,
        transport=transport,
    )

    logger.info("Authorization code exchanged for Spotify tokens")
    return StoredAuth.from_token_response(token_data)
