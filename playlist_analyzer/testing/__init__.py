"""Testing module for test mode support."""

from playlist_analyzer.testing.fixtures import DEMO_PLAYLIST_ID, DEMO_VIDEOS, get_demo_playlist
from playlist_analyzer.testing.mock_api import create_demo_transport

__all__ = ["DEMO_PLAYLIST_ID", "DEMO_VIDEOS", "get_demo_playlist", "create_demo_transport"]
