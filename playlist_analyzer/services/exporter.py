"""Report shaping for spreadsheet and JSON exports.

Both functions are pure: they turn a playlist and its statistics into
plain rows or a nested dict. Writing bytes and naming files is left to
the caller.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from playlist_analyzer.core.duration import format_long, format_short
from playlist_analyzer.core.speed import (
    COMPARISON_SPEEDS,
    SUMMARY_SPEEDS,
    project,
    speed_label,
)
from playlist_analyzer.models.playlist import PlaylistAggregate, PlaylistStats, VideoRecord

NOT_AVAILABLE = "N/A"

VIDEO_HEADERS = [
    "S.No.",
    "Title",
    "Duration",
    "Duration (Seconds)",
    "Channel",
    "Views",
    "Published Date",
    "Video URL",
]

SPEED_HEADERS = ["Speed", "Duration", "Time Saved", "Percentage Saved"]

Row = List[Any]


@dataclass
class TabularReport:
    """Rows for the three sheets of the spreadsheet export."""

    summary: List[Row] = field(default_factory=list)
    videos: List[Row] = field(default_factory=list)
    speed_comparison: List[Row] = field(default_factory=list)


def format_date(published_at: str) -> str:
    """Render an ISO 8601 timestamp as YYYY-MM-DD, or return it unchanged."""
    if not published_at:
        return ""
    try:
        return datetime.fromisoformat(published_at.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return published_at


def format_views(view_count: Optional[str]) -> str:
    """Thousands-separated view count, or N/A when missing or not a number."""
    if view_count is None:
        return NOT_AVAILABLE
    try:
        return f"{int(view_count):,}"
    except (TypeError, ValueError):
        return NOT_AVAILABLE


def percentage_saved(total_seconds: int, saved_seconds: int) -> str:
    """Share of the total saved, one decimal place; 0 when the total is 0."""
    if total_seconds <= 0:
        return "0.0%"
    return f"{saved_seconds / total_seconds * 100:.1f}%"


def _title(video: Optional[VideoRecord]) -> Optional[str]:
    return video.title if video is not None else None


def _average_short(stats: PlaylistStats) -> Optional[str]:
    if stats.average_duration_seconds is None:
        return None
    return format_short(stats.average_duration_seconds)


def to_tabular_rows(aggregate: PlaylistAggregate, stats: PlaylistStats) -> TabularReport:
    """
    Shape a playlist into summary, video detail and speed comparison rows.

    Args:
        aggregate: The fetched playlist
        stats: Statistics computed from the same playlist

    Returns:
        TabularReport with one list of rows per sheet
    """
    total = stats.total_duration_seconds

    summary: List[Row] = [
        ["Playlist Information", ""],
        ["Title", aggregate.title],
        ["Channel", aggregate.channel_title],
        ["Total Videos", stats.total_videos],
        ["Total Duration", format_long(total).formatted],
        ["Published Date", format_date(aggregate.published_at)],
        ["", ""],
        ["Speed Analysis", ""],
    ]
    for speed in SUMMARY_SPEEDS:
        label = "Normal Speed (1x)" if speed == 1 else f"{speed_label(speed)} Speed"
        summary.append([label, project(total, speed).formatted])

    summary.extend(
        [
            ["", ""],
            ["Statistics", ""],
            ["Average Video Duration", _average_short(stats) or NOT_AVAILABLE],
            ["Total Views", f"{stats.total_views:,}"],
            ["Longest Video", _title(stats.longest_video) or NOT_AVAILABLE],
            ["Shortest Video", _title(stats.shortest_video) or NOT_AVAILABLE],
        ]
    )

    videos: List[Row] = [list(VIDEO_HEADERS)]
    for index, video in enumerate(aggregate.videos, start=1):
        videos.append(
            [
                index,
                video.title,
                format_short(video.duration_seconds),
                video.duration_seconds,
                video.channel_title,
                format_views(video.view_count),
                format_date(video.published_at),
                video.watch_url,
            ]
        )

    speed_comparison: List[Row] = [list(SPEED_HEADERS)]
    for speed in COMPARISON_SPEEDS:
        projection = project(total, speed)
        saved = total - projection.projected_duration_seconds
        speed_comparison.append(
            [
                speed_label(speed),
                projection.formatted,
                format_long(saved).formatted,
                percentage_saved(total, saved),
            ]
        )

    return TabularReport(summary=summary, videos=videos, speed_comparison=speed_comparison)


def to_json_document(aggregate: PlaylistAggregate, stats: PlaylistStats) -> Dict[str, Any]:
    """
    Shape a playlist into the nested JSON export document.

    Args:
        aggregate: The fetched playlist
        stats: Statistics computed from the same playlist

    Returns:
        Dict with "playlist", "videos" and "statistics" groups
    """
    total_formatted = format_long(stats.total_duration_seconds).formatted

    return {
        "playlist": {
            "title": aggregate.title,
            "url": aggregate.url,
            "total_duration": total_formatted,
            "video_count": stats.total_videos,
        },
        "videos": [
            {
                "title": video.title,
                "duration": format_short(video.duration_seconds),
                "channel": video.channel_title,
                "views": video.view_count,
                "url": video.watch_url,
            }
            for video in aggregate.videos
        ],
        "statistics": {
            "total_duration": total_formatted,
            "average_duration": _average_short(stats),
            "longest_video": _title(stats.longest_video),
            "shortest_video": _title(stats.shortest_video),
        },
    }
