"""
Profile and listening statistics endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from spotify_api import SpotifyClient, load_overview
from spotify_oauth import SessionOrchestrator
from ..dependencies import get_client, get_session

router = APIRouter()

TimeRange = Query("medium_term", pattern="^(short_term|medium_term|long_term)$")


@router.get("/me")
async def me(
    session: SessionOrchestrator = Depends(get_session),
    client: SpotifyClient = Depends(get_client),
):
    """Current user's profile"""
    profile = session.profile or await client.get_current_user()
    return profile.model_dump()


@router.get("/overview")
async def overview(
    time_range: str = TimeRange,
    client: SpotifyClient = Depends(get_client),
):
    """Profile, top tracks, top artists, recent plays and derived stats in one load"""
    result = await load_overview(client, time_range=time_range)
    return result.model_dump()


@router.get("/top/{kind}")
async def top_items(
    kind: str,
    limit: int = Query(20, ge=1, le=50),
    time_range: str = TimeRange,
    client: SpotifyClient = Depends(get_client),
):
    if kind == "tracks":
        items = await client.get_top_tracks(limit=limit, time_range=time_range)
    elif kind == "artists":
        items = await client.get_top_artists(limit=limit, time_range=time_range)
    else:
        raise HTTPException(status_code=404, detail=f"Unknown top item kind '{kind}'")
    return {"items": [item.model_dump() for item in items]}


@router.get("/recently-played")
async def recently_played(
    limit: int = Query(50, ge=1, le=50),
    client: SpotifyClient = Depends(get_client),
):
    plays = await client.get_recently_played(limit=limit)
    return {"items": [play.model_dump() for play in plays]}
