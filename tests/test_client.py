import asyncio

import httpx
import pytest

from errors import DEV_MODE_FORBIDDEN_MESSAGE, SpotifyAPIError, SpotifyForbiddenError
from spotify_api import SpotifyClient, StaticTokenProvider
from tests.conftest import FakeSpotify, json_of


class RotatingTokenProvider:
    """Hands out 'old' until refreshed, then 'new'"""

    can_refresh = True

    def __init__(self):
        self.token = "old"
        self.refreshes = 0

    async def get_access_token(self):
        return self.token

    async def refresh(self, stale_token=None):
        self.refreshes += 1
        self.token = "new"
        return self.token


def make_client(fake, provider=None, refresh_on_401=True) -> SpotifyClient:
    return SpotifyClient(
        provider or StaticTokenProvider("token"),
        refresh_on_401=refresh_on_401,
        transport=fake.transport,
    )


def test_bearer_token_and_typed_profile():
    fake = FakeSpotify({("GET", "/v1/me"): httpx.Response(200, json={"id": "u1", "display_name": "U", "extra": 1})})
    user = asyncio.run(make_client(fake).get_current_user())

    assert user.id == "u1"
    assert fake.calls[0].headers["Authorization"] == "Bearer token"


def test_204_returns_none():
    fake = FakeSpotify({("GET", "/v1/me/player"): httpx.Response(204)})
    assert asyncio.run(make_client(fake).get_playback_state()) is None


def test_error_message_from_body():
    fake = FakeSpotify({
        ("GET", "/v1/me"): httpx.Response(429, json={"error": {"status": 429, "message": "API rate limit exceeded"}}),
    })
    with pytest.raises(SpotifyAPIError) as exc_info:
        asyncio.run(make_client(fake).get_current_user())
    assert exc_info.value.status_code == 429
    assert str(exc_info.value) == "API rate limit exceeded"


def test_error_message_falls_back_to_status():
    fake = FakeSpotify({("GET", "/v1/me"): httpx.Response(502, text="<html>bad gateway</html>")})
    with pytest.raises(SpotifyAPIError, match="HTTP 502"):
        asyncio.run(make_client(fake).get_current_user())


def test_403_is_reported_as_development_mode():
    fake = FakeSpotify({
        ("GET", "/v1/me/top/artists"): httpx.Response(403, json={"error": {"status": 403, "message": "Forbidden"}}),
    })
    with pytest.raises(SpotifyForbiddenError) as exc_info:
        asyncio.run(make_client(fake).get_top_artists())
    assert str(exc_info.value) == DEV_MODE_FORBIDDEN_MESSAGE
    assert exc_info.value.provider_message == "Forbidden"


def _expiring_me(request):
    if request.headers["Authorization"] == "Bearer old":
        return httpx.Response(401, json={"error": {"status": 401, "message": "The access token expired"}})
    return httpx.Response(200, json={"id": "u1"})


def test_401_triggers_single_refresh_and_retry():
    fake = FakeSpotify({("GET", "/v1/me"): _expiring_me})
    provider = RotatingTokenProvider()

    user = asyncio.run(make_client(fake, provider).get_current_user())

    assert user.id == "u1"
    assert provider.refreshes == 1
    assert len(fake.calls) == 2


def test_401_without_refresh_policy_surfaces_error():
    fake = FakeSpotify({("GET", "/v1/me"): _expiring_me})
    provider = RotatingTokenProvider()

    with pytest.raises(SpotifyAPIError) as exc_info:
        asyncio.run(make_client(fake, provider, refresh_on_401=False).get_current_user())
    assert exc_info.value.status_code == 401
    assert provider.refreshes == 0


def test_persistent_401_is_retried_only_once():
    fake = FakeSpotify({("GET", "/v1/me"): httpx.Response(401)})
    provider = RotatingTokenProvider()

    with pytest.raises(SpotifyAPIError):
        asyncio.run(make_client(fake, provider).get_current_user())
    assert provider.refreshes == 1
    assert len(fake.calls) == 2


def test_absolute_url_is_used_verbatim():
    fake = FakeSpotify({("GET", "/v1/me/playlists"): httpx.Response(200, json={"items": []})})
    asyncio.run(make_client(fake).get("https://api.spotify.com/v1/me/playlists?offset=50&limit=50"))
    assert str(fake.calls[0].url) == "https://api.spotify.com/v1/me/playlists?offset=50&limit=50"


def test_top_items_parameters():
    fake = FakeSpotify({("GET", "/v1/me/top/tracks"): httpx.Response(200, json={"items": [
        {"id": "t1", "name": "Song", "uri": "spotify:track:t1", "artists": [{"name": "A"}]},
    ]})})

    tracks = asyncio.run(make_client(fake).get_top_tracks(limit=80, time_range="short_term"))

    assert tracks[0].artists[0].name == "A"
    params = fake.calls[0].url.params
    assert params["limit"] == "50"
    assert params["time_range"] == "short_term"


def test_invalid_time_range():
    with pytest.raises(ValueError):
        asyncio.run(make_client(FakeSpotify()).get_top_tracks(time_range="forever"))


def test_playback_controls():
    fake = FakeSpotify({
        ("PUT", "/v1/me/player/pause"): httpx.Response(204),
        ("POST", "/v1/me/player/next"): httpx.Response(204),
        ("PUT", "/v1/me/player/shuffle"): httpx.Response(204),
        ("PUT", "/v1/me/player/repeat"): httpx.Response(204),
    })
    client = make_client(fake)

    async def scenario():
        await client.pause_playback()
        await client.skip_to_next()
        await client.set_shuffle(True)
        await client.set_repeat_mode("track")

    asyncio.run(scenario())

    assert [(c.method, c.url.path) for c in fake.calls] == [
        ("PUT", "/v1/me/player/pause"),
        ("POST", "/v1/me/player/next"),
        ("PUT", "/v1/me/player/shuffle"),
        ("PUT", "/v1/me/player/repeat"),
    ]
    assert fake.calls[2].url.params["state"] == "true"
    assert fake.calls[3].url.params["state"] == "track"
    with pytest.raises(ValueError):
        asyncio.run(client.set_repeat_mode("forever"))


def test_search_returns_first_uri_or_none():
    def search(request):
        if request.url.params["q"] == "nothing":
            return httpx.Response(200, json={"tracks": {"items": []}})
        return httpx.Response(200, json={"tracks": {"items": [{"uri": "spotify:track:1"}]}})

    fake = FakeSpotify({("GET", "/v1/search"): search})
    client = make_client(fake)

    assert asyncio.run(client.search_first_track_uri("Artist - Song")) == "spotify:track:1"
    assert asyncio.run(client.search_first_track_uri("nothing")) is None
    assert fake.calls[0].url.params["type"] == "track"
    assert fake.calls[0].url.params["limit"] == "1"


def test_create_playlist():
    fake = FakeSpotify({("POST", "/v1/users/user-1/playlists"): httpx.Response(201, json={
        "id": "pl1",
        "external_urls": {"spotify": "https://open.spotify.com/playlist/pl1"},
    })})

    created = asyncio.run(make_client(fake).create_playlist("user-1", "Mix", "desc"))

    assert created.id == "pl1"
    assert created.external_url == "https://open.spotify.com/playlist/pl1"
    assert json_of(fake.calls[0]) == {"name": "Mix", "description": "desc", "public": False}


def test_add_tracks_in_chunks_of_100():
    fake = FakeSpotify({("POST", "/v1/playlists/pl1/tracks"): httpx.Response(201, json={"snapshot_id": "s"})})
    uris = [f"spotify:track:{i}" for i in range(250)]

    asyncio.run(make_client(fake).add_tracks_to_playlist("pl1", uris))

    chunks = [json_of(call)["uris"] for call in fake.calls]
    assert [len(chunk) for chunk in chunks] == [100, 100, 50]
    assert sum(chunks, []) == uris


def test_user_playlists():
    fake = FakeSpotify({("GET", "/v1/me/playlists"): httpx.Response(200, json={"items": [
        {"id": "p1", "name": "Road Trip", "public": True, "tracks": {"total": 12}},
        None,
    ]})})

    playlists = asyncio.run(make_client(fake).get_user_playlists())

    assert [p.name for p in playlists] == ["Road Trip"]
    assert playlists[0].tracks.total == 12
