"""
Playback state and control endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException

from spotify_api import SpotifyClient
from ..dependencies import get_client
from ..models import RepeatRequest, ShuffleRequest

router = APIRouter(prefix="/player")


@router.get("")
async def playback_state(client: SpotifyClient = Depends(get_client)):
    """Current playback, or {"active": false} when no device is playing"""
    state = await client.get_playback_state()
    if state is None:
        return {"active": False}
    return {"active": True, **state.model_dump()}


@router.post("/{action}")
async def playback_action(action: str, client: SpotifyClient = Depends(get_client)):
    actions = {
        "pause": client.pause_playback,
        "play": client.resume_playback,
        "next": client.skip_to_next,
        "previous": client.skip_to_previous,
    }
    if action not in actions:
        raise HTTPException(status_code=404, detail=f"Unknown playback action '{action}'")
    await actions[action]()
    return {"status": "ok", "action": action}


@router.put("/shuffle")
async def shuffle(body: ShuffleRequest, client: SpotifyClient = Depends(get_client)):
    await client.set_shuffle(body.state)
    return {"status": "ok", "shuffle_state": body.state}


@router.put("/repeat")
async def repeat(body: RepeatRequest, client: SpotifyClient = Depends(get_client)):
    await client.set_repeat_mode(body.mode)
    return {"status": "ok", "repeat_state": body.mode}
