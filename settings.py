from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Server configuration
PORT = config.get("PORT", 8081)
LOG_LEVEL = config.get("LOG_LEVEL", "info")
BIND_ADDRESS = config.get("BIND_ADDRESS", "127.0.0.1")

# Timeout configuration
# Connection timeout: Time to establish TCP connection
CONNECT_TIMEOUT = config.get("CONNECT_TIMEOUT", 10.0)
# Request timeout: Total timeout for Spotify and AI requests
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 60.0)

# Spotify OAuth configuration
# Authorization Code + PKCE, no client secret involved
SPOTIFY_CLIENT_ID = config.get("SPOTIFY_CLIENT_ID", None)
SPOTIFY_REDIRECT_URI = config.get("SPOTIFY_REDIRECT_URI", f"http://127.0.0.1:{PORT}/callback")
SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_BASE = "https://api.spotify.com/v1/"
SCOPES = config.get_list("SPOTIFY_SCOPES", [
    "user-read-email",
    "user-read-private",
    "user-top-read",
    "user-read-recently-played",
    "user-read-playback-state",
    "user-modify-playback-state",
    "playlist-read-private",
    "playlist-modify-private",
    "playlist-modify-public",
])

# Stored expiry is the provider expiry minus this margin
TOKEN_EXPIRY_MARGIN_MS = 60000

# One refresh-and-retry on HTTP 401 from the resource API
SPOTIFY_REFRESH_ON_401 = config.get("SPOTIFY_REFRESH_ON_401", True)

# Credential storage (auth payload and PKCE verifier live in separate slots)
TOKEN_FILE = config.get_path("TOKEN_FILE", "~/.spotistats/auth.json")
PKCE_FILE = config.get_path("PKCE_FILE", "~/.spotistats/pkce_verifier.json")

# Generative-text configuration
AI_PROVIDER = config.get("AI_PROVIDER", "gemini")
AI_API_KEY = config.get_first(["AI_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY"], None)
AI_MODEL = config.get("AI_MODEL", "gemini-1.5-flash")
AI_BASE_URL = config.get("AI_BASE_URL", None)
# Canned plan, no network call; for exercising the pipeline without credentials
AI_TEST_MODE = config.get("AI_TEST_MODE", False)
AI_MIN_QUERIES = 30
AI_MAX_QUERIES = 30
PLAN_NAME_MAX_LENGTH = 80
PLAN_DESCRIPTION_MAX_LENGTH = 300

GEMINI_API_BASE = "https://generativelanguage.googleapis.com"
OPENAI_API_BASE = "https://api.openai.com/v1"

# Playlist assembly
MIN_PLAYLIST_TRACKS = 20
MAX_PLAYLIST_TRACKS = 50
# Spotify accepts at most 100 URIs per add-items call
PLAYLIST_ADD_CHUNK_SIZE = 100
