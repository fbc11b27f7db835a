"""Playlist data models.

VideoRecord and PlaylistAggregate are built once per fetch and never
mutated afterwards. Derived values (durations, totals) are properties so
they can never drift from the data they are computed from.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from playlist_analyzer.core.duration import decode_duration


def pick_thumbnail(thumbnails: Dict[str, Any], preferred: str) -> str:
    """Return the preferred thumbnail URL, falling back to the default one."""
    for key in (preferred, "default"):
        url = (thumbnails.get(key) or {}).get("url")
        if url:
            return url
    return ""


@dataclass(frozen=True)
class VideoRecord:
    """One playlist entry enriched with video details."""

    id: str
    title: str
    channel_title: str
    thumbnail_url: str
    published_at: str  # ISO 8601
    duration_raw: str  # compact encoding, e.g. "PT4M13S"
    view_count: Optional[str] = None  # absent when statistics are hidden
    description: Optional[str] = None

    @property
    def duration_seconds(self) -> int:
        """Decoded duration in seconds."""
        return decode_duration(self.duration_raw)

    @property
    def watch_url(self) -> str:
        return f"https://youtube.com/watch?v={self.id}"

    @classmethod
    def from_api_item(cls, item: Dict[str, Any]) -> "VideoRecord":
        """
        Build a record from one ``videos.list`` item.

        Args:
            item: Video resource with snippet, contentDetails and statistics

        Returns:
            VideoRecord
        """
        snippet = item.get("snippet") or {}
        content_details = item.get("contentDetails") or {}
        statistics = item.get("statistics") or {}

        return cls(
            id=item.get("id", ""),
            title=snippet.get("title", ""),
            channel_title=snippet.get("channelTitle", ""),
            thumbnail_url=pick_thumbnail(snippet.get("thumbnails") or {}, "medium"),
            published_at=snippet.get("publishedAt", ""),
            duration_raw=content_details.get("duration", ""),
            view_count=statistics.get("viewCount"),
            description=snippet.get("description"),
        )


@dataclass(frozen=True)
class PlaylistAggregate:
    """A playlist with all of its retrievable videos, in membership order."""

    id: str
    title: str
    description: str
    channel_title: str
    thumbnail_url: str
    item_count: int  # as reported upstream, may exceed len(videos)
    published_at: str
    videos: Tuple[VideoRecord, ...] = field(default_factory=tuple)

    @property
    def total_duration_seconds(self) -> int:
        """Sum of all video durations."""
        return sum(video.duration_seconds for video in self.videos)

    @property
    def url(self) -> str:
        return f"https://youtube.com/playlist?list={self.id}"


@dataclass(frozen=True)
class PlaylistStats:
    """Aggregate statistics derived from a PlaylistAggregate.

    For an empty playlist the average and the extremes are undefined and
    are reported as None; check ``is_empty`` before relying on them.
    """

    total_videos: int
    total_duration_seconds: int
    total_views: int
    average_duration_seconds: Optional[int]
    longest_video: Optional[VideoRecord]
    shortest_video: Optional[VideoRecord]

    @property
    def is_empty(self) -> bool:
        return self.total_videos == 0
