"""
FastAPI application initialization and configuration.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from errors import SpotistatsError
from playlist_ai import PlanGenerator
from spotify_oauth import SessionOrchestrator
from .errors import spotistats_error_handler
from .middleware import log_requests_middleware
from .endpoints import (
    auth_router,
    dashboard_router,
    health_router,
    player_router,
    playlists_router,
)

logger = logging.getLogger(__name__)


def create_app(
    session: Optional[SessionOrchestrator] = None,
    generator: Optional[PlanGenerator] = None,
) -> FastAPI:
    """Build the dashboard service around one session

    Args:
        session: Session orchestrator (a default one is created if omitted)
        generator: Plan generator (a default one is created if omitted)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Adopt or refresh a stored session before serving requests
        state = await app.state.session.initialize()
        logger.info(f"Session initialized: {state.value}")
        yield

    app = FastAPI(title="Spotistats", version="1.0.0", lifespan=lifespan)
    app.state.session = session or SessionOrchestrator()
    app.state.generator = generator or PlanGenerator()

    # Add middleware
    app.middleware("http")(log_requests_middleware)
    app.add_exception_handler(SpotistatsError, spotistats_error_handler)

    # Register routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(player_router)
    app.include_router(playlists_router)

    logger.debug("FastAPI application initialized with all routers and middleware")
    return app
