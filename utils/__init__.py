"""Shared utilities package for spotistats"""

from .storage import TokenStorage

__all__ = [
    "TokenStorage",
]
