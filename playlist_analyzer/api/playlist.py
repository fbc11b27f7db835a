"""Playlist analysis endpoints.

Every playlist endpoint accepts either a playlist URL (``url``) or a bare
identifier (``playlist_id``) and performs one fresh fetch per request.
"""

from typing import Any, List, Literal, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from playlist_analyzer.api.schemas import (
    DurationFormatResponse,
    PlaylistResponse,
    PlaylistSummary,
    SpeedProjectionResponse,
    StatsResponse,
    VideoListResponse,
    VideoResponse,
)
from playlist_analyzer.core.config import AnalysisConfig
from playlist_analyzer.core.duration import format_long, format_short
from playlist_analyzer.core.errors import APIError, ErrorCode
from playlist_analyzer.core.speed import SUMMARY_SPEEDS, project, speed_label
from playlist_analyzer.core.validation import extract_playlist_id, validate_playlist_id
from playlist_analyzer.middleware.auth import require_api_key
from playlist_analyzer.models.playlist import PlaylistAggregate, VideoRecord
from playlist_analyzer.providers.exceptions import InvalidPlaylistURLError
from playlist_analyzer.services.fetcher import PlaylistFetcher
from playlist_analyzer.services.stats import summarize

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["playlist"])


# Dependency placeholders, overridden in main.create_app
async def get_playlist_fetcher() -> PlaylistFetcher:
    """Get playlist fetcher instance."""
    raise NotImplementedError("Playlist fetcher dependency not configured")


async def get_analysis_config() -> AnalysisConfig:
    """Get analysis configuration."""
    raise NotImplementedError("Analysis config dependency not configured")


async def resolve_playlist_id(
    url: Optional[str] = Query(None, description="Playlist URL containing list="),  # noqa: B008
    playlist_id: Optional[str] = Query(None, description="Bare playlist ID"),  # noqa: B008
) -> str:
    """
    Resolve the playlist identifier from the query string.

    Raises:
        APIError: INVALID_URL if neither parameter yields a valid identifier
    """
    if url:
        try:
            return extract_playlist_id(url)
        except InvalidPlaylistURLError as e:
            raise APIError(ErrorCode.INVALID_URL, str(e))

    if playlist_id:
        result = validate_playlist_id(playlist_id)
        if result.is_valid and result.sanitized_value:
            return result.sanitized_value
        raise APIError(ErrorCode.INVALID_URL, result.error_message or "Invalid playlist ID")

    raise APIError(
        ErrorCode.INVALID_URL,
        "Either 'url' or 'playlist_id' must be provided",
    )


def speed_projections(base_seconds: int, speeds: Any = SUMMARY_SPEEDS) -> List[SpeedProjectionResponse]:
    """Projections of a duration at each of ``speeds``."""
    return [
        SpeedProjectionResponse.from_projection(
            project(base_seconds, speed), base_seconds, speed_label(speed)
        )
        for speed in speeds
    ]


def filter_videos(videos: Any, search: Optional[str]) -> List[VideoRecord]:
    """Videos whose title or channel contains ``search``, case-insensitively."""
    if not search:
        return list(videos)
    needle = search.strip().lower()
    return [
        video
        for video in videos
        if needle in video.title.lower() or needle in video.channel_title.lower()
    ]


def sort_videos(videos: List[VideoRecord], sort_by: Optional[str], order: str) -> List[VideoRecord]:
    """Return a sorted copy; without ``sort_by`` playlist order is kept."""
    if not sort_by:
        return list(videos)

    reverse = order == "desc"
    if sort_by == "duration":
        return sorted(videos, key=lambda v: v.duration_seconds, reverse=reverse)
    if sort_by == "title":
        return sorted(videos, key=lambda v: v.title.lower(), reverse=reverse)
    return sorted(videos, key=lambda v: v.published_at, reverse=reverse)


async def _fetch(fetcher: PlaylistFetcher, playlist_id: str) -> PlaylistAggregate:
    aggregate = await fetcher.fetch(playlist_id)
    logger.info(
        "playlist_analyzed",
        playlist_id=playlist_id,
        video_count=len(aggregate.videos),
    )
    return aggregate


@router.get(
    "/playlist",
    response_model=PlaylistResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"description": "Invalid playlist URL"},
        404: {"description": "Playlist not found or private"},
        502: {"description": "Upstream API failure"},
    },
)
async def get_playlist(
    playlist_id: str = Depends(resolve_playlist_id),  # noqa: B008
    fetcher: PlaylistFetcher = Depends(get_playlist_fetcher),  # noqa: B008
) -> Any:
    """
    Analyze a playlist.

    Returns the playlist metadata, every video in playlist order, the
    aggregate statistics and projections at the standard playback speeds.
    """
    aggregate = await _fetch(fetcher, playlist_id)
    stats = summarize(aggregate)

    return PlaylistResponse(
        playlist=PlaylistSummary.from_aggregate(aggregate),
        videos=[VideoResponse.from_record(video) for video in aggregate.videos],
        stats=StatsResponse.from_stats(stats),
        speeds=speed_projections(stats.total_duration_seconds),
    )


@router.get(
    "/playlist/stats",
    response_model=StatsResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"description": "Invalid playlist URL"},
        404: {"description": "Playlist not found or private"},
        502: {"description": "Upstream API failure"},
    },
)
async def get_playlist_stats(
    playlist_id: str = Depends(resolve_playlist_id),  # noqa: B008
    fetcher: PlaylistFetcher = Depends(get_playlist_fetcher),  # noqa: B008
) -> Any:
    """Aggregate statistics only (totals, average, longest and shortest video)."""
    aggregate = await _fetch(fetcher, playlist_id)
    return StatsResponse.from_stats(summarize(aggregate))


@router.get(
    "/playlist/speed",
    response_model=SpeedProjectionResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"description": "Invalid playlist URL or speed out of range"},
        404: {"description": "Playlist not found or private"},
        502: {"description": "Upstream API failure"},
    },
)
async def get_playlist_speed(
    speed: float = Query(..., description="Playback speed multiplier"),  # noqa: B008
    playlist_id: str = Depends(resolve_playlist_id),  # noqa: B008
    fetcher: PlaylistFetcher = Depends(get_playlist_fetcher),  # noqa: B008
    analysis: AnalysisConfig = Depends(get_analysis_config),  # noqa: B008
) -> Any:
    """
    Project the playlist's total duration onto a custom playback speed.

    The speed must lie within the configured bounds (0.25-3.0 by default).
    """
    if not analysis.min_speed <= speed <= analysis.max_speed:
        raise APIError(
            ErrorCode.INVALID_SPEED,
            f"Speed must be between {analysis.min_speed:g} and {analysis.max_speed:g}, got {speed:g}",
        )

    aggregate = await _fetch(fetcher, playlist_id)
    total = aggregate.total_duration_seconds
    return SpeedProjectionResponse.from_projection(project(total, speed), total, speed_label(speed))


@router.get(
    "/playlist/videos",
    response_model=VideoListResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"description": "Invalid playlist URL"},
        404: {"description": "Playlist not found or private"},
        502: {"description": "Upstream API failure"},
    },
)
async def get_playlist_videos(
    search: Optional[str] = Query(None, description="Match on title or channel"),  # noqa: B008
    sort_by: Optional[Literal["duration", "title", "published"]] = Query(  # noqa: B008
        None, description="Sort key; playlist order when omitted"
    ),
    order: Literal["asc", "desc"] = Query("asc", description="Sort direction"),  # noqa: B008
    playlist_id: str = Depends(resolve_playlist_id),  # noqa: B008
    fetcher: PlaylistFetcher = Depends(get_playlist_fetcher),  # noqa: B008
) -> Any:
    """
    List a playlist's videos, optionally filtered and sorted.

    Filtering and sorting produce a new list; the fetched playlist keeps
    its membership order.
    """
    aggregate = await _fetch(fetcher, playlist_id)
    videos = sort_videos(filter_videos(aggregate.videos, search), sort_by, order)

    return VideoListResponse(
        playlist_id=aggregate.id,
        total=len(aggregate.videos),
        count=len(videos),
        videos=[VideoResponse.from_record(video) for video in videos],
    )


@router.get(
    "/duration/format",
    response_model=DurationFormatResponse,
    dependencies=[Depends(require_api_key)],
)
async def format_duration(
    seconds: int = Query(..., ge=0, description="Duration in seconds"),  # noqa: B008
) -> Any:
    """Render a number of seconds in the short and long forms."""
    breakdown = format_long(seconds)
    return DurationFormatResponse(
        seconds=seconds,
        short=format_short(seconds),
        long=breakdown.formatted,
        days=breakdown.days,
        hours=breakdown.hours,
        minutes=breakdown.minutes,
        remaining_seconds=breakdown.seconds,
    )
