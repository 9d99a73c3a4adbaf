"""PKCE (Proof Key for Code Exchange) generation and management"""

import base64
import hashlib
import secrets
import string
from typing import Optional

from utils.storage import TokenStorage
from .models import PkceCodes

VERIFIER_ALPHABET = string.ascii_letters + string.digits
DEFAULT_VERIFIER_LENGTH = 64


def create_verifier(length: int = DEFAULT_VERIFIER_LENGTH) -> str:
    """Generate a high-entropy code_verifier (43-128 chars, RFC 7636)"""
    if not 43 <= length <= 128:
        raise ValueError("PKCE verifier length must be between 43 and 128")
    return "".join(secrets.choice(VERIFIER_ALPHABET) for _ in range(length))


def create_challenge(verifier: str) -> str:
    """Derive the S256 code_challenge: base64url(sha256(verifier)) without padding"""
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8").rstrip("=")


class PKCEManager:
    """Manages PKCE code verifier and challenge generation and storage"""

    def __init__(self, storage: TokenStorage):
        self.storage = storage

    def generate_pkce(self) -> PkceCodes:
        """Generate PKCE code verifier and challenge

        Returns:
            PkceCodes with verifier and challenge
        """
        code_verifier = create_verifier()
        return PkceCodes(code_verifier=code_verifier, code_challenge=create_challenge(code_verifier))

    def save_verifier(self, verifier: str):
        """Persist the verifier so it survives the redirect round trip"""
        self.storage.save_verifier(verifier)

    def load_verifier(self) -> Optional[str]:
        return self.storage.load_verifier()

    def clear_verifier(self):
        """Clear the verifier after use"""
        self.storage.clear_verifier()
