"""
Endpoint handlers for the dashboard service.
"""
from .health import router as health_router
from .auth import router as auth_router
from .dashboard import router as dashboard_router
from .player import router as player_router
from .playlists import router as playlists_router

__all__ = [
    'health_router',
    'auth_router',
    'dashboard_router',
    'player_router',
    'playlists_router',
]
