"""
DashboardServer class for CLI control of the FastAPI application.
"""
import logging
import uvicorn

from settings import PORT, LOG_LEVEL, BIND_ADDRESS, SPOTIFY_REDIRECT_URI
from .app import create_app

logger = logging.getLogger(__name__)


class DashboardServer:
    """Dashboard server wrapper for CLI control"""

    def __init__(self, bind_address: str = None, port: int = None):
        self.server = None
        self.config = None
        self.bind_address = bind_address or BIND_ADDRESS
        self.port = port or PORT

    def run(self):
        """Run the dashboard server (blocking)"""
        logger.info(f"Starting Spotistats on http://{self.bind_address}:{self.port}")
        logger.info(f"Spotify redirect URI: {SPOTIFY_REDIRECT_URI}")
        self.config = uvicorn.Config(
            create_app(),
            host=self.bind_address,
            port=self.port,
            log_level=LOG_LEVEL,
            access_log=False  # Middleware already logs requests
        )
        self.server = uvicorn.Server(self.config)
        self.server.run()
