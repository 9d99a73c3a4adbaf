"""
Pydantic models for Spotify Web API resources.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class SpotifyModel(BaseModel):
    """Base model, tolerant of fields Spotify adds over time"""
    model_config = ConfigDict(extra="ignore")


class SpotifyImage(SpotifyModel):
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


class Followers(SpotifyModel):
    total: int = 0


class SpotifyUser(SpotifyModel):
    """Current user's profile"""
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    country: Optional[str] = None
    product: Optional[str] = None
    followers: Optional[Followers] = None
    images: List[SpotifyImage] = Field(default_factory=list)


class SpotifyArtist(SpotifyModel):
    id: str
    name: str
    genres: List[str] = Field(default_factory=list)
    popularity: Optional[int] = None
    followers: Optional[Followers] = None
    images: List[SpotifyImage] = Field(default_factory=list)


class ArtistRef(SpotifyModel):
    """Simplified artist embedded in a track"""
    name: str
    id: Optional[str] = None


class AlbumRef(SpotifyModel):
    name: str
    images: List[SpotifyImage] = Field(default_factory=list)


class SpotifyTrack(SpotifyModel):
    id: Optional[str] = None
    name: str
    uri: Optional[str] = None
    artists: List[ArtistRef] = Field(default_factory=list)
    album: Optional[AlbumRef] = None
    popularity: Optional[int] = None
    duration_ms: Optional[int] = None


class RecentPlay(SpotifyModel):
    played_at: str
    track: SpotifyTrack


class PlaybackDevice(SpotifyModel):
    id: Optional[str] = None
    name: str
    type: Optional[str] = None
    volume_percent: Optional[int] = None


class PlaybackState(SpotifyModel):
    """Current playback; absent entirely when nothing is playing"""
    is_playing: bool = False
    shuffle_state: bool = False
    repeat_state: str = "off"
    progress_ms: Optional[int] = None
    device: Optional[PlaybackDevice] = None
    item: Optional[SpotifyTrack] = None


class PlaylistTracksRef(SpotifyModel):
    total: int = 0


class PlaylistOwner(SpotifyModel):
    id: str
    display_name: Optional[str] = None


class SimplePlaylist(SpotifyModel):
    id: str
    name: str
    description: Optional[str] = None
    public: Optional[bool] = None
    uri: Optional[str] = None
    external_urls: dict = Field(default_factory=dict)
    images: Optional[List[SpotifyImage]] = None
    owner: Optional[PlaylistOwner] = None
    tracks: Optional[PlaylistTracksRef] = None


class CreatedPlaylist(SpotifyModel):
    """Identifier and user-facing URL of a newly created playlist"""
    id: str
    external_url: str
