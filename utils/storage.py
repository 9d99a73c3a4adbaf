import json
import logging
import os
import platform
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from settings import TOKEN_FILE, PKCE_FILE

logger = logging.getLogger(__name__)


class TokenStorage:
    """Persisted credential slots: the StoredAuth payload and the PKCE verifier

    Both slots are plain JSON files with owner-only permissions. The verifier
    lives in its own file because it has to survive the round trip through
    the identity provider while no session exists yet.
    """

    def __init__(self, token_file: Optional[str] = None, pkce_file: Optional[str] = None):
        self.token_path = Path(token_file if token_file else TOKEN_FILE)
        self.pkce_path = Path(pkce_file if pkce_file else PKCE_FILE)
        # Serializes writers (web handlers and the CLI may share a process)
        self._lock = threading.Lock()
        self._ensure_secure_directory(self.token_path)
        self._ensure_secure_directory(self.pkce_path)

    def _ensure_secure_directory(self, path: Path):
        """Create parent directory with secure permissions"""
        parent_dir = path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def _write_secure(self, path: Path, data: Dict[str, Any]):
        path.write_text(json.dumps(data, indent=2))
        if platform.system() != "Windows":
            os.chmod(path, 0o600)

    def _read_json(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable credential file {path}: {e}")
            return None
        return data if isinstance(data, dict) else None

    # StoredAuth slot

    def save_auth(self, auth: Dict[str, Any]):
        """Persist a serialized StoredAuth, replacing any previous one"""
        with self._lock:
            self._write_secure(self.token_path, auth)
        logger.debug(f"Saved credentials to {self.token_path}")

    def load_auth(self) -> Optional[Dict[str, Any]]:
        """Load the serialized StoredAuth, or None if absent or corrupt"""
        data = self._read_json(self.token_path)
        if data is None or not data.get("accessToken"):
            return None
        return data

    def clear_auth(self):
        with self._lock:
            if self.token_path.exists():
                self.token_path.unlink()

    # PKCE verifier slot

    def save_verifier(self, verifier: str):
        with self._lock:
            self._write_secure(self.pkce_path, {"code_verifier": verifier})

    def load_verifier(self) -> Optional[str]:
        data = self._read_json(self.pkce_path)
        if not data:
            return None
        return data.get("code_verifier") or None

    def clear_verifier(self):
        with self._lock:
            if self.pkce_path.exists():
                self.pkce_path.unlink()

    def clear_all(self):
        """Remove both persisted slots"""
        self.clear_auth()
        self.clear_verifier()
        logger.info("Cleared stored credentials")

    def get_status(self) -> Dict[str, Any]:
        """Get token status without exposing secrets"""
        auth = self.load_auth()
        if not auth:
            return {
                "has_tokens": False,
                "is_expired": True,
                "has_refresh_token": False,
                "expires_at": None,
                "time_until_expiry": "No tokens",
            }

        expires_at_ms = int(auth.get("expiresAt", 0))
        current_ms = int(time.time() * 1000)
        expires_str = datetime.fromtimestamp(expires_at_ms / 1000).isoformat()

        if current_ms >= expires_at_ms:
            time_since = (current_ms - expires_at_ms) // 1000
            hours_since = time_since // 3600
            mins_since = (time_since % 3600) // 60
            if hours_since > 0:
                time_str = f"{hours_since}h {mins_since}m ago"
            else:
                time_str = f"{mins_since}m ago"
            return {
                "has_tokens": True,
                "is_expired": True,
                "has_refresh_token": bool(auth.get("refreshToken")),
                "expires_at": expires_str,
                "time_until_expiry": time_str,
            }

        time_remaining = (expires_at_ms - current_ms) // 1000
        hours = time_remaining // 3600
        minutes = (time_remaining % 3600) // 60
        time_str = f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"

        return {
            "has_tokens": True,
            "is_expired": False,
            "has_refresh_token": bool(auth.get("refreshToken")),
            "expires_at": expires_str,
            "time_until_expiry": time_str,
            "expires_in_seconds": time_remaining,
        }
