"""
Request logging middleware.
"""
import logging
import time

from fastapi import Request

logger = logging.getLogger(__name__)

# Polled by the dashboard; logged at DEBUG only
QUIET_PATHS = ("/health", "/auth/status")


async def log_requests_middleware(request: Request, call_next):
    """Log method, path, status and duration of each request

    Only the path is logged. The query string of /callback carries the
    authorization code.
    """
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    line = f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f} ms)"
    if request.url.path in QUIET_PATHS:
        logger.debug(line)
    else:
        logger.info(line)
    return response
