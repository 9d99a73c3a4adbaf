"""
Authenticated client for the Spotify Web API.

All authenticated calls pass through ``SpotifyClient.request``; that is the
only place that attaches the bearer token, translates errors and applies the
401 refresh policy. The typed wrappers below add no error handling of their own.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote
import httpx

from errors import SpotifyAPIError, SpotifyForbiddenError
from settings import (
    CONNECT_TIMEOUT,
    PLAYLIST_ADD_CHUNK_SIZE,
    REQUEST_TIMEOUT,
    SPOTIFY_API_BASE,
    SPOTIFY_REFRESH_ON_401,
)
from .models import (
    CreatedPlaylist,
    PlaybackState,
    RecentPlay,
    SimplePlaylist,
    SpotifyArtist,
    SpotifyTrack,
    SpotifyUser,
)

logger = logging.getLogger(__name__)

TIME_RANGES = ("short_term", "medium_term", "long_term")
REPEAT_MODES = ("off", "track", "context")
STATE_CHANGING_METHODS = ("POST", "PUT", "DELETE")


class TokenProvider(Protocol):
    """Source of bearer tokens (the session orchestrator in practice)"""

    can_refresh: bool

    async def get_access_token(self) -> str:
        ...

    async def refresh(self, stale_token: Optional[str] = None) -> str:
        ...


class StaticTokenProvider:
    """Token provider for a fixed access token that cannot be refreshed"""

    can_refresh = False

    def __init__(self, access_token: str):
        self.access_token = access_token

    async def get_access_token(self) -> str:
        return self.access_token

    async def refresh(self, stale_token: Optional[str] = None) -> str:
        return self.access_token


def _clamp_limit(limit: int, maximum: int = 50) -> int:
    return max(1, min(int(limit), maximum))


def _error_message(response: httpx.Response) -> str:
    """Message from Spotify's {"error": {"message": ...}} body, else 'HTTP {status}'"""
    message = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return message


class SpotifyClient:
    """Spotify Web API client with typed endpoint wrappers"""

    def __init__(
        self,
        token_provider: TokenProvider,
        refresh_on_401: bool = SPOTIFY_REFRESH_ON_401,
        api_base: str = SPOTIFY_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client

        Args:
            token_provider: Supplies (and optionally refreshes) the bearer token
            refresh_on_401: Refresh once and retry when Spotify answers 401
            api_base: Resource API root that relative endpoints resolve against
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.token_provider = token_provider
        self.refresh_on_401 = refresh_on_401
        self.api_base = api_base if api_base.endswith("/") else f"{api_base}/"
        self.transport = transport

    def _build_url(self, endpoint: str) -> str:
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint
        return f"{self.api_base}{endpoint.lstrip('/')}"

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        params: Optional[Dict[str, Any]],
        json: Any,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"}
        if method in STATE_CHANGING_METHODS:
            headers["Content-Type"] = "application/json"

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT),
            transport=self.transport,
        ) as client:
            return await client.request(method, url, params=params, json=json, headers=headers)

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Make an authenticated request and return the decoded JSON body

        Args:
            method: HTTP verb
            endpoint: Path relative to the API root, or an absolute URL
            params: Query parameters
            json: JSON body for state-changing verbs

        Returns:
            Decoded JSON, or None for 204 / empty bodies

        Raises:
            SpotifyForbiddenError: On 403 (development-mode allowlist)
            SpotifyAPIError: On any other non-2xx response
        """
        method = method.upper()
        url = self._build_url(endpoint)
        token = await self.token_provider.get_access_token()

        logger.debug(f"Spotify {method} {url}")
        response = await self._send(method, url, token, params, json)

        if response.status_code == 401 and self.refresh_on_401 and self.token_provider.can_refresh:
            logger.info("Spotify returned 401, refreshing token and retrying once")
            token = await self.token_provider.refresh(stale_token=token)
            response = await self._send(method, url, token, params, json)

        if not response.is_success:
            message = _error_message(response)
            logger.warning(f"Spotify {method} {url} failed: {response.status_code} {message}")
            if response.status_code == 403:
                raise SpotifyForbiddenError(message)
            raise SpotifyAPIError(response.status_code, message)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", endpoint, params=params, json=json)

    async def put(self, endpoint: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", endpoint, params=params, json=json)

    # Profile and listening history

    async def get_current_user(self) -> SpotifyUser:
        return SpotifyUser.model_validate(await self.get("me"))

    async def get_top_tracks(self, limit: int = 20, time_range: str = "medium_term") -> List[SpotifyTrack]:
        data = await self._get_top("tracks", limit, time_range)
        return [SpotifyTrack.model_validate(item) for item in data.get("items", [])]

    async def get_top_artists(self, limit: int = 20, time_range: str = "medium_term") -> List[SpotifyArtist]:
        data = await self._get_top("artists", limit, time_range)
        return [SpotifyArtist.model_validate(item) for item in data.get("items", [])]

    async def _get_top(self, kind: str, limit: int, time_range: str) -> Dict[str, Any]:
        if time_range not in TIME_RANGES:
            raise ValueError(f"time_range must be one of {TIME_RANGES}")
        return await self.get(
            f"me/top/{kind}",
            params={"limit": _clamp_limit(limit), "time_range": time_range},
        ) or {}

    async def get_recently_played(self, limit: int = 50) -> List[RecentPlay]:
        data = await self.get("me/player/recently-played", params={"limit": _clamp_limit(limit)}) or {}
        return [RecentPlay.model_validate(item) for item in data.get("items", [])]

    # Playback

    async def get_playback_state(self) -> Optional[PlaybackState]:
        """Current playback, or None when no device is active"""
        data = await self.get("me/player")
        return PlaybackState.model_validate(data) if data else None

    async def pause_playback(self):
        await self.put("me/player/pause")

    async def resume_playback(self):
        await self.put("me/player/play")

    async def skip_to_next(self):
        await self.post("me/player/next")

    async def skip_to_previous(self):
        await self.post("me/player/previous")

    async def set_shuffle(self, state: bool):
        await self.put("me/player/shuffle", params={"state": "true" if state else "false"})

    async def set_repeat_mode(self, mode: str):
        if mode not in REPEAT_MODES:
            raise ValueError(f"repeat mode must be one of {REPEAT_MODES}")
        await self.put("me/player/repeat", params={"state": mode})

    # Playlists and search

    async def get_user_playlists(self, limit: int = 50) -> List[SimplePlaylist]:
        data = await self.get("me/playlists", params={"limit": _clamp_limit(limit)}) or {}
        return [SimplePlaylist.model_validate(item) for item in data.get("items", []) if item]

    async def create_playlist(
        self,
        user_id: str,
        name: str,
        description: str = "",
        public: bool = False,
    ) -> CreatedPlaylist:
        data = await self.post(
            f"users/{quote(user_id, safe='')}/playlists",
            json={"name": name, "description": description, "public": public},
        )
        return CreatedPlaylist(
            id=data["id"],
            external_url=(data.get("external_urls") or {}).get("spotify", ""),
        )

    async def add_tracks_to_playlist(self, playlist_id: str, uris: List[str]):
        """Add tracks in order, chunked to Spotify's per-call item limit"""
        for start in range(0, len(uris), PLAYLIST_ADD_CHUNK_SIZE):
            chunk = uris[start:start + PLAYLIST_ADD_CHUNK_SIZE]
            await self.post(f"playlists/{quote(playlist_id, safe='')}/tracks", json={"uris": chunk})

    async def search_first_track_uri(self, query: str) -> Optional[str]:
        """URI of the best track match for a query, or None if nothing matches"""
        data = await self.get("search", params={"q": query, "type": "track", "limit": 1}) or {}
        items = (data.get("tracks") or {}).get("items") or []
        if not items or not items[0]:
            return None
        return items[0].get("uri")
