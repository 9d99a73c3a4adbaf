"""Configuration loader for Spotistats

Values are resolved in this order:
1. Environment variables
2. .env file (loaded into the environment, never overriding it)
3. Defaults passed by settings.py

Blank values (``SPOTIFY_CLIENT_ID=`` in a .env template) count as unset.
"""

import logging
import os
from pathlib import Path
from typing import Any, Iterable, List, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes", "on")


class ConfigLoader:
    """Reads typed settings from the environment and an optional .env file"""

    def __init__(self, env_path: Optional[str] = None):
        """
        Args:
            env_path: Path to a .env file, '.env' in the working directory if omitted
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        if self.env_path.exists():
            load_dotenv(dotenv_path=self.env_path)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f"No .env file at {self.env_path}; using environment and defaults")

    def _raw(self, env_var: str) -> Optional[str]:
        value = os.getenv(env_var)
        if value is None or not value.strip():
            return None
        return value.strip()

    def _coerce(self, env_var: str, value: str, default: Any) -> Any:
        """Parse a raw string into the type of the default"""
        # bool first: bool is a subclass of int
        if isinstance(default, bool):
            return value.lower() in TRUE_VALUES
        for kind in (int, float):
            if isinstance(default, kind):
                try:
                    return kind(value)
                except ValueError:
                    logger.warning(f"Invalid {kind.__name__} for {env_var}={value!r}, using default {default}")
                    return default
        return value

    def get(self, env_var: str, default: Any) -> Any:
        """Value of env_var coerced to the default's type, or the default"""
        value = self._raw(env_var)
        if value is None:
            return default
        return self._coerce(env_var, value, default)

    def get_first(self, env_vars: Iterable[str], default: Any) -> Any:
        """First set value among several alias variables, checked in order"""
        for env_var in env_vars:
            value = self._raw(env_var)
            if value is not None:
                return self._coerce(env_var, value, default)
        return default

    def get_path(self, env_var: str, default: str) -> str:
        """Filesystem path with '~' expanded, whether configured or default"""
        return str(Path(self.get(env_var, default)).expanduser())

    def get_list(self, env_var: str, default: List[str]) -> List[str]:
        """Comma- or space-separated list"""
        value = self._raw(env_var)
        if value is None:
            return list(default)
        return [item for item in value.replace(",", " ").split() if item]


_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Shared ConfigLoader, created on first use"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader
