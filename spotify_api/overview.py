"""Dashboard overview: concurrent load of profile, top items and recent plays"""

import asyncio
import logging
from typing import List

from pydantic import BaseModel

from .client import SpotifyClient
from .models import RecentPlay, SpotifyArtist, SpotifyTrack, SpotifyUser
from .stats import GenreStat, RecentPatterns, compute_genre_stats, compute_recent_patterns

logger = logging.getLogger(__name__)


class DashboardOverview(BaseModel):
    profile: SpotifyUser
    top_tracks: List[SpotifyTrack]
    top_artists: List[SpotifyArtist]
    recent_plays: List[RecentPlay]
    genre_stats: List[GenreStat]
    recent_patterns: RecentPatterns


async def load_overview(
    client: SpotifyClient,
    top_tracks_limit: int = 8,
    top_artists_limit: int = 50,
    recent_limit: int = 50,
    time_range: str = "medium_term",
) -> DashboardOverview:
    """Fetch the four dashboard reads concurrently

    The reads are independent, so latency is that of the slowest one. All of
    them settle before returning; if any failed, the whole load fails with
    that call's error.
    """
    results = await asyncio.gather(
        client.get_current_user(),
        client.get_top_tracks(limit=top_tracks_limit, time_range=time_range),
        client.get_top_artists(limit=top_artists_limit, time_range=time_range),
        client.get_recently_played(limit=recent_limit),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    profile, top_tracks, top_artists, recent_plays = results
    logger.debug(
        f"Overview loaded: {len(top_tracks)} tracks, {len(top_artists)} artists, {len(recent_plays)} plays"
    )
    return DashboardOverview(
        profile=profile,
        top_tracks=top_tracks,
        top_artists=top_artists,
        recent_plays=recent_plays,
        genre_stats=compute_genre_stats(top_artists),
        recent_patterns=compute_recent_patterns(recent_plays),
    )
