import asyncio

import httpx
import pytest

from errors import ConfigurationError, NotAuthenticatedError, SessionStateError, TokenExchangeError
from spotify_oauth import SessionEvent, SessionOrchestrator, SessionState
from spotify_oauth.session import MISSING_CLIENT_ID_MESSAGE
from tests.conftest import (
    CLIENT_ID,
    REDIRECT_URI,
    TOKEN_PATH,
    form_of,
    profile_response,
    stored_auth,
    token_response,
)

ME_PATH = "/v1/me"


def make_session(storage, fake, client_id=CLIENT_ID, **kwargs) -> SessionOrchestrator:
    kwargs.setdefault("refresh_on_401", True)
    return SessionOrchestrator(
        storage=storage,
        client_id=client_id,
        redirect_uri=REDIRECT_URI,
        transport=fake.transport,
        **kwargs,
    )


def test_fresh_code_beats_stored_token(storage, fake_spotify):
    fake_spotify.routes[("POST", TOKEN_PATH)] = token_response(access_token="exchanged")
    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    storage.save_auth(stored_auth(access_token="stored-token"))
    storage.save_verifier("the-verifier")
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize(f"{REDIRECT_URI}?code=auth-code"))

    assert state is SessionState.READY
    form = form_of(fake_spotify.calls_to(TOKEN_PATH)[0])
    assert form == {
        "client_id": CLIENT_ID,
        "grant_type": "authorization_code",
        "code": "auth-code",
        "redirect_uri": REDIRECT_URI,
        "code_verifier": "the-verifier",
    }
    assert storage.load_auth()["accessToken"] == "exchanged"
    assert storage.load_verifier() is None
    assert session.redirect_url == REDIRECT_URI
    assert session.profile.id == "user-1"


def test_failed_exchange_consumes_verifier(storage, fake_spotify):
    fake_spotify.routes[("POST", TOKEN_PATH)] = httpx.Response(
        400, json={"error": "invalid_grant", "error_description": "Invalid authorization code"}
    )
    storage.save_verifier("the-verifier")
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize(f"{REDIRECT_URI}?code=bad"))

    assert state is SessionState.IDLE
    assert "Invalid authorization code" in session.last_error
    assert storage.load_verifier() is None
    assert storage.load_auth() is None


def test_code_without_verifier_is_ignored(storage, fake_spotify):
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize(f"{REDIRECT_URI}?code=orphan"))

    assert state is SessionState.IDLE
    assert fake_spotify.calls == []


def test_denied_authorization_stays_idle(storage, fake_spotify):
    session = make_session(storage, fake_spotify)
    session.authorize()

    state = asyncio.run(session.initialize(f"{REDIRECT_URI}?error=access_denied"))

    assert state is SessionState.IDLE
    assert session.last_error == "Authorization denied: access_denied"
    assert storage.load_verifier() is None


def test_adopts_unexpired_stored_token(storage, fake_spotify):
    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    storage.save_auth(stored_auth(access_token="stored-token"))
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize())

    assert state is SessionState.READY
    assert fake_spotify.calls_to(TOKEN_PATH) == []
    assert fake_spotify.calls_to(ME_PATH)[0].headers["Authorization"] == "Bearer stored-token"


def test_refreshes_expired_stored_token(storage, fake_spotify):
    # Provider does not rotate the refresh token here
    fake_spotify.routes[("POST", TOKEN_PATH)] = token_response(access_token="refreshed", refresh_token=None)
    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    storage.save_auth(stored_auth(refresh_token="keep-me", expires_in_ms=-1000))
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize())

    assert state is SessionState.READY
    form = form_of(fake_spotify.calls_to(TOKEN_PATH)[0])
    assert form["grant_type"] == "refresh_token"
    assert form["refresh_token"] == "keep-me"
    saved = storage.load_auth()
    assert saved["accessToken"] == "refreshed"
    assert saved["refreshToken"] == "keep-me"


def test_rejected_refresh_clears_everything(storage, fake_spotify):
    fake_spotify.routes[("POST", TOKEN_PATH)] = httpx.Response(400, json={"error": "invalid_grant"})
    storage.save_auth(stored_auth(expires_in_ms=-1000))
    storage.save_verifier("leftover")
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize())

    assert state is SessionState.IDLE
    assert storage.load_auth() is None
    assert storage.load_verifier() is None
    assert "invalid_grant" in session.last_error


def test_expired_without_refresh_token_stays_idle(storage, fake_spotify):
    storage.save_auth(stored_auth(refresh_token=None, expires_in_ms=-1000))
    session = make_session(storage, fake_spotify)

    assert asyncio.run(session.initialize()) is SessionState.IDLE
    assert fake_spotify.calls == []


def test_missing_client_id(storage, fake_spotify):
    session = make_session(storage, fake_spotify, client_id=None)

    assert asyncio.run(session.initialize()) is SessionState.IDLE
    assert session.last_error == MISSING_CLIENT_ID_MESSAGE
    with pytest.raises(ConfigurationError):
        session.authorize()


def test_authorize_persists_verifier(storage, fake_spotify):
    session = make_session(storage, fake_spotify)

    url = session.authorize()

    assert url.startswith("https://accounts.spotify.com/authorize?")
    assert session.state is SessionState.AUTHORIZING
    assert storage.load_verifier()


def test_authorize_while_ready_requires_force(storage, fake_spotify):
    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    storage.save_auth(stored_auth())
    session = make_session(storage, fake_spotify)
    asyncio.run(session.initialize())

    with pytest.raises(SessionStateError):
        session.authorize()

    session.authorize(force=True)
    assert session.state is SessionState.AUTHORIZING
    assert storage.load_auth() is None


def test_logout_clears_both_slots(storage, fake_spotify):
    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    storage.save_auth(stored_auth())
    session = make_session(storage, fake_spotify)
    asyncio.run(session.initialize())
    storage.save_verifier("pending")

    session.logout()

    assert session.state is SessionState.IDLE
    assert session.profile is None
    assert storage.load_auth() is None
    assert storage.load_verifier() is None


def test_illegal_transition_rejected(storage, fake_spotify):
    session = make_session(storage, fake_spotify)
    with pytest.raises(SessionStateError):
        session._transition(SessionEvent.SUCCEED)
    assert session.state is SessionState.IDLE


def test_access_token_requires_session(storage, fake_spotify):
    session = make_session(storage, fake_spotify)
    with pytest.raises(NotAuthenticatedError):
        asyncio.run(session.get_access_token())


def test_401_refreshes_once_and_retries(storage, fake_spotify):
    def me(request):
        if request.headers["Authorization"] == "Bearer stored-token":
            return httpx.Response(401, json={"error": {"status": 401, "message": "The access token expired"}})
        return profile_response()

    fake_spotify.routes[("GET", ME_PATH)] = me
    fake_spotify.routes[("POST", TOKEN_PATH)] = token_response(access_token="fresh")
    storage.save_auth(stored_auth(access_token="stored-token"))
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize())

    assert state is SessionState.READY
    assert len(fake_spotify.calls_to(TOKEN_PATH)) == 1
    assert [c.headers["Authorization"] for c in fake_spotify.calls_to(ME_PATH)] == [
        "Bearer stored-token",
        "Bearer fresh",
    ]
    assert session.profile.id == "user-1"


def test_401_with_rejected_refresh_logs_out(storage, fake_spotify):
    fake_spotify.routes[("GET", "/v1/me/top/tracks")] = httpx.Response(401)
    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    fake_spotify.routes[("POST", TOKEN_PATH)] = httpx.Response(400, json={"error": "invalid_grant"})
    storage.save_auth(stored_auth())
    session = make_session(storage, fake_spotify)

    async def scenario():
        await session.initialize()
        await session.client.get_top_tracks()

    with pytest.raises(TokenExchangeError):
        asyncio.run(scenario())
    assert session.state is SessionState.IDLE
    assert storage.load_auth() is None


def test_401_policy_can_be_disabled(storage, fake_spotify):
    fake_spotify.routes[("GET", ME_PATH)] = httpx.Response(401)
    storage.save_auth(stored_auth())
    session = make_session(storage, fake_spotify, refresh_on_401=False)

    state = asyncio.run(session.initialize())

    # Profile failure is logged, the session itself stays usable
    assert state is SessionState.READY
    assert session.profile is None
    assert fake_spotify.calls_to(TOKEN_PATH) == []


def test_status_has_no_secrets(storage, fake_spotify):
    fake_spotify.routes[("GET", ME_PATH)] = profile_response(display_name="Listener")
    storage.save_auth(stored_auth(access_token="very-secret"))
    session = make_session(storage, fake_spotify)
    asyncio.run(session.initialize())

    status = session.status()

    assert status["state"] == "ready"
    assert status["profile"] == {"id": "user-1", "display_name": "Listener"}
    assert "very-secret" not in repr(status)


def test_concurrent_401s_share_one_refresh(storage, fake_spotify):
    session_ref = {}

    async def slow_token(request):
        # Other callers arrive while this refresh is in flight
        assert session_ref["session"].state is SessionState.REFRESHING
        assert session_ref["session"].has_session
        await asyncio.sleep(0.01)
        return token_response(access_token="fresh")

    def top_tracks(request):
        if request.headers["Authorization"] == "Bearer stored-token":
            return httpx.Response(401, json={"error": {"status": 401, "message": "The access token expired"}})
        return httpx.Response(200, json={"items": [{"id": "t1", "name": "Song"}]})

    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    fake_spotify.routes[("GET", "/v1/me/top/tracks")] = top_tracks
    fake_spotify.routes[("POST", TOKEN_PATH)] = slow_token
    storage.save_auth(stored_auth(access_token="stored-token"))
    session = make_session(storage, fake_spotify)
    session_ref["session"] = session

    async def scenario():
        await session.initialize()
        return await asyncio.gather(*(session.client.get_top_tracks() for _ in range(4)))

    results = asyncio.run(scenario())

    assert [len(tracks) for tracks in results] == [1, 1, 1, 1]
    assert len(fake_spotify.calls_to(TOKEN_PATH)) == 1
    assert session.state is SessionState.READY
    assert storage.load_auth()["accessToken"] == "fresh"


def test_waiters_see_failed_refresh_as_logged_out(storage, fake_spotify):
    async def rejected(request):
        await asyncio.sleep(0.01)
        return httpx.Response(400, json={"error": "invalid_grant"})

    fake_spotify.routes[("GET", ME_PATH)] = profile_response()
    fake_spotify.routes[("POST", TOKEN_PATH)] = rejected
    storage.save_auth(stored_auth())
    session = make_session(storage, fake_spotify)

    async def scenario():
        await session.initialize()
        session._auth.expires_at = 0
        return await asyncio.gather(
            *(session.get_access_token() for _ in range(3)),
            return_exceptions=True,
        )

    results = asyncio.run(scenario())

    assert isinstance(results[0], TokenExchangeError)
    assert all(isinstance(r, NotAuthenticatedError) for r in results[1:])
    assert len(fake_spotify.calls_to(TOKEN_PATH)) == 1
    assert session.state is SessionState.IDLE


@pytest.mark.parametrize("reply", [
    httpx.Response(200, json={"token_type": "Bearer"}),
    httpx.Response(200, text="<html>ok</html>"),
    httpx.Response(200, json={"access_token": "a", "expires_in": "soon"}),
])
def test_malformed_exchange_reply_returns_to_idle(storage, fake_spotify, reply):
    fake_spotify.routes[("POST", TOKEN_PATH)] = reply
    storage.save_verifier("the-verifier")
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize(f"{REDIRECT_URI}?code=abc"))

    assert state is SessionState.IDLE
    assert "malformed token response" in session.last_error
    assert storage.load_verifier() is None
    # A new round trip can start right away
    session.authorize()
    assert session.state is SessionState.AUTHORIZING


def test_malformed_refresh_reply_forces_logout(storage, fake_spotify):
    fake_spotify.routes[("POST", TOKEN_PATH)] = httpx.Response(200, json={"token_type": "Bearer"})
    storage.save_auth(stored_auth(expires_in_ms=-1000))
    session = make_session(storage, fake_spotify)

    state = asyncio.run(session.initialize())

    assert state is SessionState.IDLE
    assert "malformed token response" in session.last_error
    assert storage.load_auth() is None
