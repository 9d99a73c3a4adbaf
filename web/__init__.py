"""
Spotistats local dashboard service.

Serves the session lifecycle, listening statistics, playback control and
AI playlist generation as JSON endpoints on localhost.
"""
from .server import DashboardServer
from .app import create_app

__version__ = "1.0.0"

__all__ = [
    'DashboardServer',
    'create_app',
]
