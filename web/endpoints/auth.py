"""
Authentication endpoints: login redirect, provider callback, logout, status.
"""
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from spotify_oauth import SessionOrchestrator
from ..dependencies import get_session

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
@router.get("/auth/status")
async def auth_status(session: SessionOrchestrator = Depends(get_session)):
    """Session state, last error and token expiry without exposing secrets"""
    return session.status()


@router.get("/login")
async def login(force: bool = False, session: SessionOrchestrator = Depends(get_session)):
    """Send the browser to Spotify's authorize page"""
    url = session.authorize(force=force)
    return RedirectResponse(url, status_code=307)


@router.get("/callback")
async def callback(request: Request, session: SessionOrchestrator = Depends(get_session)):
    """Spotify redirects back here with ?code=... (or ?error=...)"""
    await session.initialize(str(request.url))
    # Land on the dashboard root so the code is gone from the address bar
    return RedirectResponse("/", status_code=303)


@router.post("/logout")
async def logout(session: SessionOrchestrator = Depends(get_session)):
    session.logout()
    return session.status()
