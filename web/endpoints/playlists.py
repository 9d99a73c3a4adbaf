"""
Playlist listing and AI playlist generation endpoints.
"""
import logging
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, Query

from errors import NotAuthenticatedError
from playlist_ai import PlanGenerator, PlaylistAssembler, ProgressEvent, generate_and_assemble
from spotify_api import SpotifyClient
from spotify_oauth import SessionOrchestrator
from ..dependencies import get_client, get_generator, get_session
from ..models import GeneratePlaylistRequest, PromptRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/playlists")


@router.get("")
async def list_playlists(
    limit: int = Query(50, ge=1, le=50),
    client: SpotifyClient = Depends(get_client),
):
    playlists = await client.get_user_playlists(limit=limit)
    return {"items": [playlist.model_dump() for playlist in playlists]}


@router.post("/plan")
async def plan_playlist(body: PromptRequest, generator: PlanGenerator = Depends(get_generator)):
    """Generate a plan without touching Spotify"""
    plan = await generator.generate(body.prompt)
    return plan.model_dump()


@router.post("/generate")
async def generate_playlist(
    body: GeneratePlaylistRequest,
    session: SessionOrchestrator = Depends(get_session),
    client: SpotifyClient = Depends(get_client),
    generator: PlanGenerator = Depends(get_generator),
):
    """Generate a plan and create the playlist in the user's account

    Progress messages are collected and returned with the result.
    """
    profile = session.profile or await session.load_profile()
    if profile is None:
        raise NotAuthenticatedError("Profile unavailable; reconnect your Spotify account")

    progress: List[ProgressEvent] = []
    assembler = PlaylistAssembler(client, on_progress=progress.append)
    plan, result = await generate_and_assemble(
        generator, assembler, profile.id, body.prompt, public=body.public
    )
    return {
        "plan": plan.model_dump(),
        "result": asdict(result),
        "progress": [asdict(event) for event in progress],
    }
