"""Abstract base class for playlist data sources."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class PlaylistSource(ABC):
    """Read-only access to a platform's playlist and video resources."""

    @abstractmethod
    async def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        """
        Retrieve playlist metadata.

        Args:
            playlist_id: Playlist identifier

        Returns:
            The playlist resource (snippet and contentDetails)

        Raises:
            PlaylistNotFoundError: If the playlist does not exist or is private
            UpstreamError: If the upstream call fails
        """
        pass

    @abstractmethod
    async def list_playlist_items(
        self, playlist_id: str, page_token: Optional[str] = None, max_results: int = 50
    ) -> Dict[str, Any]:
        """
        Retrieve one page of playlist membership.

        Args:
            playlist_id: Playlist identifier
            page_token: Continuation token from the previous page
            max_results: Page size (at most 50)

        Returns:
            Page response with ``items`` and an optional ``nextPageToken``

        Raises:
            UpstreamError: If the upstream call fails
        """
        pass

    @abstractmethod
    async def list_videos(self, video_ids: List[str]) -> List[Dict[str, Any]]:
        """
        Retrieve video details for a batch of identifiers.

        Args:
            video_ids: Video identifiers (at most 50)

        Returns:
            Video resources with snippet, contentDetails and statistics

        Raises:
            UpstreamError: If the upstream call fails
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """
        Check that the upstream API is reachable.

        Returns:
            True if the API answered, False otherwise
        """
        pass
