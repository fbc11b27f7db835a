"""API endpoints."""

from playlist_analyzer.api import export, health, playlist

__all__ = [
    "export",
    "health",
    "playlist",
]
