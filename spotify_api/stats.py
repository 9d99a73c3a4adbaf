"""Descriptive listening statistics derived from top artists and recent plays"""

from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from .models import RecentPlay, SpotifyArtist


class GenreStat(BaseModel):
    genre: str
    count: int
    artists: List[str]


class HourCount(BaseModel):
    hour: int
    count: int


class RecentPatterns(BaseModel):
    top_hours: List[HourCount]
    top_artist: Optional[str] = None


def compute_genre_stats(artists: List[SpotifyArtist], top: int = 8, artists_per_genre: int = 4) -> List[GenreStat]:
    """Most frequent genres across artists, with a few example artist names each"""
    counts: Dict[str, int] = {}
    names: Dict[str, List[str]] = {}
    for artist in artists:
        for genre in artist.genres:
            counts[genre] = counts.get(genre, 0) + 1
            genre_artists = names.setdefault(genre, [])
            if artist.name not in genre_artists:
                genre_artists.append(artist.name)

    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:top]
    return [
        GenreStat(genre=genre, count=count, artists=names[genre][:artists_per_genre])
        for genre, count in ranked
    ]


def _played_hour(played_at: str) -> int:
    # Spotify timestamps look like 2024-05-01T18:04:12.345Z
    moment = datetime.fromisoformat(played_at.replace("Z", "+00:00"))
    return moment.astimezone().hour


def compute_recent_patterns(plays: List[RecentPlay], top_hours: int = 3) -> RecentPatterns:
    """Busiest hours of the day (local time) and the most played artist"""
    by_hour = [0] * 24
    artist_counts: Counter = Counter()
    for play in plays:
        by_hour[_played_hour(play.played_at)] += 1
        for artist in play.track.artists:
            artist_counts[artist.name] += 1

    hours = sorted(
        (HourCount(hour=hour, count=count) for hour, count in enumerate(by_hour)),
        key=lambda h: h.count,
        reverse=True,
    )[:top_hours]
    most_common = artist_counts.most_common(1)
    return RecentPatterns(top_hours=hours, top_artist=most_common[0][0] if most_common else None)
