"""OAuth token refresh functionality"""

import logging
from typing import Optional

import httpx

from settings import SPOTIFY_TOKEN_URL
from .models import StoredAuth
from .token_exchange import post_token_request

logger = logging.getLogger(__name__)


async def refresh_access_token(
    refresh_token: str,
    client_id: str,
    token_url: str = SPOTIFY_TOKEN_URL,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> StoredAuth:
    """Refresh an expired access token

    The previous refresh token is kept when the provider does not rotate it.

    Raises:
        TokenExchangeError: If the provider rejects the refresh token
    """
    logger.info("Attempting to refresh Spotify access token...")
    token_data = await post_token_request(
        {
            "client_id": client_id,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        },
        "refresh",
        token_url=token_url,
        transport=transport,
    )

    logger.info("Successfully refreshed Spotify access token")
    return StoredAuth.from_token_response(token_data, fallback_refresh_token=refresh_token)
