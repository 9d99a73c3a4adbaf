"""CLI package for Spotistats

This package provides the command-line interface: login/logout, listening
stats, playback control, AI playlist generation and the local dashboard server.
"""

from cli.cli_app import SpotistatsCLI
from cli.main import main

__all__ = [
    "SpotistatsCLI",
    "main",
]
