"""
Liveness endpoint.
"""
import time
from fastapi import APIRouter, Depends

from spotify_oauth import SessionOrchestrator
from ..dependencies import get_session

router = APIRouter()


@router.get("/health")
async def health_check(session: SessionOrchestrator = Depends(get_session)):
    """Service is up; includes the session state so the dashboard can poll one URL"""
    return {"status": "healthy", "session": session.state.value, "timestamp": time.time()}
