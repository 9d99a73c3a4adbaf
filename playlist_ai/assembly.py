"""Realize a PlaylistPlan on Spotify: resolve queries, create, populate"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from errors import AssemblyCancelledError, InsufficientMatchesError
from settings import MAX_PLAYLIST_TRACKS, MIN_PLAYLIST_TRACKS
from spotify_api.client import SpotifyClient
from .generator import PlanGenerator
from .plan import PlaylistPlan

logger = logging.getLogger(__name__)


@dataclass
class ProgressEvent:
    stage: str
    message: str


@dataclass
class AssemblyResult:
    playlist_id: str
    playlist_url: str
    track_count: int
    uris: List[str] = field(default_factory=list)
    unmatched_queries: List[str] = field(default_factory=list)


ProgressCallback = Callable[[ProgressEvent], None]


class PlaylistAssembler:
    """Searches each plan query, enforces the match floor and writes the playlist"""

    def __init__(
        self,
        client: SpotifyClient,
        min_tracks: int = MIN_PLAYLIST_TRACKS,
        max_tracks: int = MAX_PLAYLIST_TRACKS,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.client = client
        self.min_tracks = min_tracks
        self.max_tracks = max_tracks
        self.on_progress = on_progress

    def report_progress(self, stage: str, message: str):
        logger.info(message)
        if self.on_progress:
            self.on_progress(ProgressEvent(stage=stage, message=message))

    async def resolve_queries(
        self,
        queries,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[Tuple[str, Optional[str]]]:
        """Search queries one at a time, in plan order

        Stops once max_tracks URIs have been found. Calls are sequential to
        stay clear of Spotify's rate limits.
        """
        resolutions: List[Tuple[str, Optional[str]]] = []
        found = 0
        for query in queries:
            if cancel_event is not None and cancel_event.is_set():
                raise AssemblyCancelledError("Playlist generation was cancelled")
            uri = await self.client.search_first_track_uri(query)
            resolutions.append((query, uri))
            if uri:
                found += 1
            else:
                logger.debug(f"No match for query: {query}")
            if found >= self.max_tracks:
                break
        return resolutions

    async def assemble(
        self,
        owner_id: str,
        plan: PlaylistPlan,
        public: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AssemblyResult:
        """Create a playlist for owner_id from the plan

        Raises:
            InsufficientMatchesError: Fewer than min_tracks queries matched; nothing is created
            AssemblyCancelledError: cancel_event was set before a query was searched
        """
        self.report_progress("searching", f"Searching {len(plan.queries)} songs...")
        resolutions = await self.resolve_queries(plan.queries, cancel_event)
        uris = [uri for _, uri in resolutions if uri]
        unmatched = [query for query, uri in resolutions if not uri]

        if len(uris) < self.min_tracks:
            raise InsufficientMatchesError(len(uris), self.min_tracks)

        if cancel_event is not None and cancel_event.is_set():
            raise AssemblyCancelledError("Playlist generation was cancelled")

        self.report_progress("creating", f"Creating playlist '{plan.name}'...")
        created = await self.client.create_playlist(owner_id, plan.name, plan.description, public=public)

        self.report_progress("adding", f"Adding {len(uris)} songs...")
        await self.client.add_tracks_to_playlist(created.id, uris)

        self.report_progress("done", f"Playlist created with {len(uris)} songs.")
        return AssemblyResult(
            playlist_id=created.id,
            playlist_url=created.external_url,
            track_count=len(uris),
            uris=uris,
            unmatched_queries=unmatched,
        )


async def generate_and_assemble(
    generator: PlanGenerator,
    assembler: PlaylistAssembler,
    owner_id: str,
    prompt: str,
    public: bool = False,
    cancel_event: Optional[asyncio.Event] = None,
) -> Tuple[PlaylistPlan, AssemblyResult]:
    """Generate a plan for the prompt and realize it in one go"""
    assembler.report_progress("generating", "Generating playlist plan...")
    plan = await generator.generate(prompt)
    result = await assembler.assemble(owner_id, plan, public=public, cancel_event=cancel_event)
    return plan, result
