"""
Request dependencies shared by the endpoint routers.
"""
from fastapi import Request

from errors import NotAuthenticatedError
from playlist_ai import PlanGenerator
from spotify_api import SpotifyClient
from spotify_oauth import SessionOrchestrator


def get_session(request: Request) -> SessionOrchestrator:
    return request.app.state.session


def get_generator(request: Request) -> PlanGenerator:
    return request.app.state.generator


def get_client(request: Request) -> SpotifyClient:
    """Spotify client of an authenticated session

    Raises:
        NotAuthenticatedError: If no session is ready
    """
    session = get_session(request)
    if not session.has_session:
        raise NotAuthenticatedError()
    return session.client
