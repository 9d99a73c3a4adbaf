"""Data models for Spotify OAuth authentication"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from settings import TOKEN_EXPIRY_MARGIN_MS


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class StoredAuth:
    """Persisted access/refresh token pair

    Attributes:
        access_token: Bearer token for the Spotify Web API
        refresh_token: Token for refreshing the access token, if issued
        expires_at: Epoch millis, provider expiry minus the safety margin
    """
    access_token: str
    refresh_token: Optional[str]
    expires_at: int

    @classmethod
    def from_token_response(
        cls,
        token_data: Dict[str, Any],
        fallback_refresh_token: Optional[str] = None,
        issued_at_ms: Optional[int] = None,
    ) -> "StoredAuth":
        """Build from an identity provider token response

        Args:
            token_data: JSON body of the token endpoint response
            fallback_refresh_token: Kept when the response carries no new refresh token
            issued_at_ms: Reference time in epoch millis (defaults to now)
        """
        if issued_at_ms is None:
            issued_at_ms = now_ms()
        expires_in = int(token_data.get("expires_in", 3600))
        return cls(
            access_token=token_data["access_token"],
            refresh_token=token_data.get("refresh_token") or fallback_refresh_token,
            expires_at=issued_at_ms + expires_in * 1000 - TOKEN_EXPIRY_MARGIN_MS,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredAuth":
        return cls(
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken"),
            expires_at=int(data.get("expiresAt", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "accessToken": self.access_token,
            "expiresAt": self.expires_at,
        }
        if self.refresh_token:
            data["refreshToken"] = self.refresh_token
        return data

    def is_expired(self, at_ms: Optional[int] = None) -> bool:
        return (now_ms() if at_ms is None else at_ms) >= self.expires_at


@dataclass
class PkceCodes:
    """PKCE (Proof Key for Code Exchange) codes for OAuth flow

    Attributes:
        code_verifier: Random string used to generate code_challenge
        code_challenge: SHA256 hash of code_verifier, sent in auth request
    """
    code_verifier: str
    code_challenge: str
