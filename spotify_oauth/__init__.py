"""Spotify OAuth (Authorization Code + PKCE) and session lifecycle"""

from .models import StoredAuth, PkceCodes
from .pkce import PKCEManager, create_verifier, create_challenge
from .authorization import (
    AuthorizationURLBuilder,
    build_authorize_url,
    extract_callback_params,
    strip_callback_params,
)
from .token_exchange import exchange_code
from .token_refresh import refresh_access_token
from .session import SessionOrchestrator, SessionState, SessionEvent

__all__ = [
    "StoredAuth",
    "PkceCodes",
    "PKCEManager",
    "create_verifier",
    "create_challenge",
    "AuthorizationURLBuilder",
    "build_authorize_url",
    "extract_callback_params",
    "strip_callback_params",
    "exchange_code",
    "refresh_access_token",
    "SessionOrchestrator",
    "SessionState",
    "SessionEvent",
]
