"""
Translate project exceptions into JSON error responses.
"""
import logging
from fastapi import Request
from fastapi.responses import JSONResponse

from errors import (
    AssemblyCancelledError,
    InsufficientMatchesError,
    NotAuthenticatedError,
    PlanGenerationError,
    SessionStateError,
    SpotifyAPIError,
    SpotistatsError,
    TokenExchangeError,
)

logger = logging.getLogger(__name__)


def status_for(exc: SpotistatsError) -> int:
    """HTTP status for a project exception"""
    if isinstance(exc, NotAuthenticatedError):
        return 401
    if isinstance(exc, SessionStateError):
        return 409
    if isinstance(exc, SpotifyAPIError):
        return exc.status_code
    if isinstance(exc, TokenExchangeError):
        # Refresh rejected: the session has been logged out
        return 401
    if isinstance(exc, (PlanGenerationError, InsufficientMatchesError, AssemblyCancelledError)):
        return 422
    return 500


async def spotistats_error_handler(request: Request, exc: SpotistatsError) -> JSONResponse:
    status_code = status_for(exc)
    logger.warning(f"{request.method} {request.url.path} failed ({status_code}): {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": type(exc).__name__, "message": str(exc)}},
    )
