"""Spotify Web API client, resource models and dashboard statistics"""

from .client import SpotifyClient, StaticTokenProvider, TIME_RANGES, REPEAT_MODES
from .models import (
    CreatedPlaylist,
    PlaybackState,
    RecentPlay,
    SimplePlaylist,
    SpotifyArtist,
    SpotifyTrack,
    SpotifyUser,
)
from .overview import DashboardOverview, load_overview
from .stats import GenreStat, RecentPatterns, compute_genre_stats, compute_recent_patterns

__all__ = [
    "SpotifyClient",
    "StaticTokenProvider",
    "TIME_RANGES",
    "REPEAT_MODES",
    "CreatedPlaylist",
    "PlaybackState",
    "RecentPlay",
    "SimplePlaylist",
    "SpotifyArtist",
    "SpotifyTrack",
    "SpotifyUser",
    "DashboardOverview",
    "load_overview",
    "GenreStat",
    "RecentPatterns",
    "compute_genre_stats",
    "compute_recent_patterns",
]
