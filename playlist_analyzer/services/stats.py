"""Playlist statistics."""

from typing import Optional

from playlist_analyzer.models.playlist import PlaylistAggregate, PlaylistStats, VideoRecord


def parse_view_count(view_count: Optional[str]) -> int:
    """View count as an integer; missing or unparsable counts are 0."""
    if view_count is None:
        return 0
    try:
        return int(view_count)
    except (TypeError, ValueError):
        return 0


def summarize(aggregate: PlaylistAggregate) -> PlaylistStats:
    """
    Compute aggregate statistics over a playlist's videos.

    The longest and shortest videos are found in one left-to-right scan
    with strict comparisons, so the first video wins ties. An empty
    playlist yields None for the average and both extremes.

    Args:
        aggregate: The fetched playlist

    Returns:
        PlaylistStats
    """
    videos = aggregate.videos
    total_videos = len(videos)
    total_duration = aggregate.total_duration_seconds

    longest: Optional[VideoRecord] = None
    shortest: Optional[VideoRecord] = None
    total_views = 0

    for video in videos:
        total_views += parse_view_count(video.view_count)
        duration = video.duration_seconds
        if longest is None or duration > longest.duration_seconds:
            longest = video
        if shortest is None or duration < shortest.duration_seconds:
            shortest = video

    return PlaylistStats(
        total_videos=total_videos,
        total_duration_seconds=total_duration,
        total_views=total_views,
        average_duration_seconds=total_duration // total_videos if total_videos else None,
        longest_video=longest,
        shortest_video=shortest,
    )
