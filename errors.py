"""Exception types shared by the session, Spotify client and playlist pipeline"""

from typing import Optional


DEV_MODE_FORBIDDEN_MESSAGE = (
    "Your Spotify account is not authorized for this app (Spotify development mode). "
    "Ask the app owner to add you under Users and Access in the Spotify Developer Dashboard."
)


class SpotistatsError(Exception):
    """Base class for all errors raised by this project"""


class ConfigurationError(SpotistatsError):
    """Required configuration (client id, API key) is missing"""


class SessionStateError(SpotistatsError):
    """An operation was requested in a session state that does not allow it"""


class NotAuthenticatedError(SpotistatsError):
    """No usable access token is available"""

    def __init__(self, message: str = "Not authenticated. Connect your Spotify account first."):
        super().__init__(message)


class TokenExchangeError(SpotistatsError):
    """The identity provider rejected a code exchange or refresh request"""

    def __init__(self, operation: str, status_code: int, detail: Optional[str] = None):
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        message = f"Token {operation} failed: HTTP {status_code}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message)


class SpotifyAPIError(SpotistatsError):
    """Non-2xx response from the Spotify Web API"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class SpotifyForbiddenError(SpotifyAPIError):
    """HTTP 403, almost always the development-mode allowlist"""

    def __init__(self, provider_message: Optional[str] = None):
        self.provider_message = provider_message
        super().__init__(403, DEV_MODE_FORBIDDEN_MESSAGE)


class PlanGenerationError(SpotistatsError):
    """The generative-text call could not produce a playlist plan"""


class InvalidAIResponseError(PlanGenerationError):
    """The generated text could not be parsed into a playlist plan"""


class InsufficientMatchesError(SpotistatsError):
    """Too few plan queries resolved to tracks"""

    def __init__(self, found: int, required: int):
        self.found = found
        self.required = required
        super().__init__(
            f"At least {required} tracks are needed; only {found} were found. "
            "Try a more specific prompt."
        )


class AssemblyCancelledError(SpotistatsError):
    """Playlist assembly was cancelled before completion"""
