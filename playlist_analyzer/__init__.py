"""Playlist duration analytics service."""

__version__ = "1.0.0"
