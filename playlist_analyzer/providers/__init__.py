"""Upstream data source implementations."""

from playlist_analyzer.providers.base import PlaylistSource
from playlist_analyzer.providers.exceptions import (
    FetchCancelledError,
    InvalidPlaylistURLError,
    PlaylistNotFoundError,
    ProviderError,
    UpstreamError,
)
from playlist_analyzer.providers.youtube import YouTubeDataClient

__all__ = [
    "PlaylistSource",
    "YouTubeDataClient",
    "ProviderError",
    "InvalidPlaylistURLError",
    "PlaylistNotFoundError",
    "UpstreamError",
    "FetchCancelledError",
]
