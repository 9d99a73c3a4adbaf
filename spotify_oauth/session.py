"""Spotify session lifecycle

The session is an explicit state machine. Every state change goes through
``SessionOrchestrator._transition`` and the table below; anything not listed
there is rejected.

    idle -> authorizing -> exchanging -> ready
    idle/ready -> refreshing -> ready | idle
    any -> idle (logout)
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional

import httpx

from errors import (
    ConfigurationError,
    NotAuthenticatedError,
    SessionStateError,
    SpotifyAPIError,
    TokenExchangeError,
)
from settings import (
    SCOPES,
    SPOTIFY_CLIENT_ID,
    SPOTIFY_REDIRECT_URI,
    SPOTIFY_REFRESH_ON_401,
    SPOTIFY_TOKEN_URL,
)
from spotify_api.client import SpotifyClient
from spotify_api.models import SpotifyUser
from utils.storage import TokenStorage
from .authorization import AuthorizationURLBuilder, extract_callback_params, strip_callback_params
from .models import StoredAuth
from .pkce import PKCEManager
from .token_exchange import exchange_code
from .token_refresh import refresh_access_token

logger = logging.getLogger(__name__)

MISSING_CLIENT_ID_MESSAGE = "SPOTIFY_CLIENT_ID is not configured. Set it in your environment or .env file."


class SessionState(str, Enum):
    IDLE = "idle"
    AUTHORIZING = "authorizing"
    EXCHANGING = "exchanging"
    REFRESHING = "refreshing"
    READY = "ready"


class SessionEvent(str, Enum):
    AUTHORIZE = "authorize"
    EXCHANGE = "exchange"
    REFRESH = "refresh"
    ADOPT = "adopt"
    SUCCEED = "succeed"
    FAIL = "fail"
    LOGOUT = "logout"


TRANSITIONS = {
    (SessionState.IDLE, SessionEvent.AUTHORIZE): SessionState.AUTHORIZING,
    (SessionState.AUTHORIZING, SessionEvent.AUTHORIZE): SessionState.AUTHORIZING,
    (SessionState.IDLE, SessionEvent.EXCHANGE): SessionState.EXCHANGING,
    (SessionState.AUTHORIZING, SessionEvent.EXCHANGE): SessionState.EXCHANGING,
    (SessionState.READY, SessionEvent.EXCHANGE): SessionState.EXCHANGING,
    (SessionState.EXCHANGING, SessionEvent.SUCCEED): SessionState.READY,
    (SessionState.EXCHANGING, SessionEvent.FAIL): SessionState.IDLE,
    (SessionState.IDLE, SessionEvent.ADOPT): SessionState.READY,
    (SessionState.AUTHORIZING, SessionEvent.ADOPT): SessionState.READY,
    (SessionState.IDLE, SessionEvent.REFRESH): SessionState.REFRESHING,
    (SessionState.AUTHORIZING, SessionEvent.REFRESH): SessionState.REFRESHING,
    (SessionState.READY, SessionEvent.REFRESH): SessionState.REFRESHING,
    (SessionState.REFRESHING, SessionEvent.SUCCEED): SessionState.READY,
    (SessionState.REFRESHING, SessionEvent.FAIL): SessionState.IDLE,
}


class SessionOrchestrator:
    """Owns the authentication lifecycle and exposes the current token and profile

    Consumers get the token through ``get_access_token`` and never write
    session fields directly.
    """

    def __init__(
        self,
        storage: Optional[TokenStorage] = None,
        client_id: Optional[str] = SPOTIFY_CLIENT_ID,
        redirect_uri: str = SPOTIFY_REDIRECT_URI,
        scopes: Iterable[str] = SCOPES,
        refresh_on_401: bool = SPOTIFY_REFRESH_ON_401,
        token_url: str = SPOTIFY_TOKEN_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.storage = storage or TokenStorage()
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes)
        self.token_url = token_url
        self.transport = transport
        self.pkce = PKCEManager(self.storage)
        self.auth_builder = AuthorizationURLBuilder(self.pkce, client_id or "", redirect_uri, self.scopes)
        self.client = SpotifyClient(self, refresh_on_401=refresh_on_401, transport=transport)

        self.state = SessionState.IDLE
        self.last_error: Optional[str] = None
        self.profile: Optional[SpotifyUser] = None
        self.redirect_url: Optional[str] = None
        self._auth: Optional[StoredAuth] = None
        self._refresh_lock = asyncio.Lock()

    # State machine

    def _transition(self, event: SessionEvent) -> SessionState:
        """Apply an event to the current state

        Raises:
            SessionStateError: If the event is not legal in the current state
        """
        if event is SessionEvent.LOGOUT:
            target = SessionState.IDLE
        else:
            target = TRANSITIONS.get((self.state, event))
            if target is None:
                raise SessionStateError(f"Cannot {event.value} while session is {self.state.value}")
        logger.debug(f"Session {self.state.value} --{event.value}--> {target.value}")
        self.state = target
        return target

    def _reset(self):
        self._auth = None
        self.profile = None

    def _fail(self, message: str):
        self.last_error = message
        self._transition(SessionEvent.FAIL)

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.READY and self._auth is not None

    @property
    def has_session(self) -> bool:
        """Ready, or mid-refresh with a token that callers can wait for"""
        return self._auth is not None and self.state in (SessionState.READY, SessionState.REFRESHING)

    @property
    def can_refresh(self) -> bool:
        return bool(self._auth and self._auth.refresh_token)

    @property
    def expires_at(self) -> Optional[int]:
        return self._auth.expires_at if self._auth else None

    # Lifecycle operations

    async def initialize(self, current_url: Optional[str] = None) -> SessionState:
        """Bootstrap the session from the callback URL and persisted storage

        Priority: a fresh authorization code beats anything stored, then an
        unexpired stored token, then a refresh of an expired one. Exchange and
        refresh never both happen in one call.

        Args:
            current_url: URL the browser landed on (may carry ?code=...)

        Returns:
            The resulting session state
        """
        self.redirect_url = None
        if not self.client_id:
            self.last_error = MISSING_CLIENT_ID_MESSAGE
            logger.error(MISSING_CLIENT_ID_MESSAGE)
            return self.state

        params = extract_callback_params(current_url) if current_url else {}
        code = params.get("code")
        verifier = self.pkce.load_verifier()

        if params.get("error"):
            # Provider denied the request (e.g. user pressed cancel)
            self.pkce.clear_verifier()
            self.redirect_url = strip_callback_params(current_url)
            self.last_error = f"Authorization denied: {params['error']}"
            logger.warning(self.last_error)
            if self.state is SessionState.AUTHORIZING:
                self._transition(SessionEvent.LOGOUT)
            return self.state

        if code and verifier:
            return await self._complete_exchange(code, verifier, current_url)

        if self.state is SessionState.READY:
            return self.state

        stored_data = self.storage.load_auth()
        if not stored_data:
            return self.state
        stored = StoredAuth.from_dict(stored_data)

        if not stored.is_expired():
            self._auth = stored
            self.last_error = None
            self._transition(SessionEvent.ADOPT)
            logger.info("Adopted stored Spotify session")
            await self.load_profile()
            return self.state

        if stored.refresh_token:
            self._auth = stored
            try:
                await self.refresh()
            except (TokenExchangeError, httpx.HTTPError):
                return self.state
            await self.load_profile()
            return self.state

        logger.info("Stored token expired and no refresh token is available")
        return self.state

    async def _complete_exchange(self, code: str, verifier: str, current_url: str) -> SessionState:
        self._transition(SessionEvent.EXCHANGE)
        try:
            auth = await exchange_code(
                code,
                verifier,
                self.client_id,
                self.redirect_uri,
                token_url=self.token_url,
                transport=self.transport,
            )
        except (TokenExchangeError, httpx.HTTPError) as e:
            self._reset()
            self._fail(str(e))
            return self.state
        finally:
            # Single use, whatever the outcome
            self.pkce.clear_verifier()

        self.storage.save_auth(auth.to_dict())
        self._auth = auth
        self.redirect_url = strip_callback_params(current_url)
        self.last_error = None
        self._transition(SessionEvent.SUCCEED)
        await self.load_profile()
        return self.state

    def authorize(self, force: bool = False) -> str:
        """Start a new authorization round trip

        Generates and persists a fresh verifier and returns the authorize URL.
        The caller performs the full navigation; the session stays
        ``authorizing`` until the browser comes back with a code.

        Args:
            force: Log out an active session first (explicit re-auth)

        Raises:
            ConfigurationError: If no client id is configured
            SessionStateError: If a session is active and force is False
        """
        if not self.client_id:
            self.last_error = MISSING_CLIENT_ID_MESSAGE
            raise ConfigurationError(MISSING_CLIENT_ID_MESSAGE)
        if self.state is SessionState.READY:
            if not force:
                raise SessionStateError("Already authenticated; log out or pass force=True to re-authorize")
            self.logout()

        self._transition(SessionEvent.AUTHORIZE)
        self.last_error = None
        url = self.auth_builder.get_authorize_url()
        logger.info("Authorization started, redirecting to Spotify")
        return url

    def logout(self):
        """Clear persisted credentials and PKCE material and return to idle"""
        self.storage.clear_all()
        self._reset()
        self.redirect_url = None
        self.last_error = None
        self._transition(SessionEvent.LOGOUT)

    async def refresh(self, stale_token: Optional[str] = None) -> str:
        """Refresh the access token

        A provider rejection is treated as permanent: credentials are cleared
        and the session falls back to idle.

        Args:
            stale_token: Token the caller saw fail; if another caller already
                replaced it, the current token is returned without a new refresh

        Returns:
            The new access token
        """
        async with self._refresh_lock:
            if stale_token and self._auth and self._auth.access_token != stale_token and self.is_authenticated:
                return self._auth.access_token
            if not self.can_refresh:
                raise NotAuthenticatedError("No refresh token available. Please log in again.")

            refresh_token = self._auth.refresh_token
            self._transition(SessionEvent.REFRESH)
            try:
                auth = await refresh_access_token(
                    refresh_token,
                    self.client_id,
                    token_url=self.token_url,
                    transport=self.transport,
                )
            except (TokenExchangeError, httpx.HTTPError) as e:
                logger.error(f"Refresh failed, forcing logout: {e}")
                self.storage.clear_all()
                self._reset()
                self._fail(str(e))
                raise

            self.storage.save_auth(auth.to_dict())
            self._auth = auth
            self.last_error = None
            self._transition(SessionEvent.SUCCEED)
            return auth.access_token

    async def get_access_token(self) -> str:
        """Return a usable access token, refreshing it first if it has expired

        Raises:
            NotAuthenticatedError: If there is no session
        """
        if not self.has_session:
            raise NotAuthenticatedError()
        if self.state is SessionState.REFRESHING:
            # Another caller holds the refresh lock; wait for its outcome
            async with self._refresh_lock:
                pass
            if not self.is_authenticated:
                raise NotAuthenticatedError("Session expired. Please log in again.")
            return self._auth.access_token
        if self._auth.is_expired():
            if not self.can_refresh:
                self.logout()
                raise NotAuthenticatedError("Session expired. Please log in again.")
            return await self.refresh(stale_token=self._auth.access_token)
        return self._auth.access_token

    async def load_profile(self) -> Optional[SpotifyUser]:
        """Fetch and cache the current user's profile

        Profile errors are logged; the session stays usable without a profile.
        """
        if not self.is_authenticated:
            return None
        try:
            self.profile = await self.client.get_current_user()
        except (SpotifyAPIError, NotAuthenticatedError, TokenExchangeError, httpx.HTTPError) as e:
            logger.error(f"Error loading profile: {e}")
        return self.profile

    def status(self) -> Dict[str, Any]:
        """Session status without exposing secrets"""
        status: Dict[str, Any] = {
            "state": self.state.value,
            "is_authenticated": self.is_authenticated,
            "error": self.last_error,
            "profile": None,
            "token": self.storage.get_status(),
        }
        if self.profile:
            status["profile"] = {
                "id": self.profile.id,
                "display_name": self.profile.display_name,
            }
        return status
