"""Data models for the application."""

from playlist_analyzer.models.playlist import PlaylistAggregate, PlaylistStats, VideoRecord

__all__ = [
    "PlaylistAggregate",
    "PlaylistStats",
    "VideoRecord",
]
