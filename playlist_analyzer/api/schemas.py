"""Request and response schemas for API endpoints.

This module provides Pydantic models for API response serialization
with OpenAPI examples, and the converters from domain objects.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from playlist_analyzer.core.duration import format_long, format_short
from playlist_analyzer.core.speed import SpeedProjection
from playlist_analyzer.models.playlist import PlaylistAggregate, PlaylistStats, VideoRecord


class VideoResponse(BaseModel):
    """One video of a playlist."""

    video_id: str = Field(..., examples=["dQw4w9WgXcQ"])
    title: str = Field(..., examples=["Rick Astley - Never Gonna Give You Up"])
    channel_title: str = Field(..., examples=["Rick Astley"])
    thumbnail_url: str = Field(..., examples=["https://i.ytimg.com/vi/dQw4w9WgXcQ/mqdefault.jpg"])
    published_at: str = Field(..., examples=["2009-10-25T06:57:33Z"])
    duration_raw: str = Field(..., description="ISO 8601 duration", examples=["PT3M33S"])
    duration_seconds: int = Field(..., examples=[213])
    duration_formatted: str = Field(..., examples=["3:33"])
    view_count: Optional[str] = Field(
        None, description="Decimal view count, absent when statistics are hidden", examples=["1500000000"]
    )
    url: str = Field(..., examples=["https://youtube.com/watch?v=dQw4w9WgXcQ"])

    @classmethod
    def from_record(cls, video: VideoRecord) -> "VideoResponse":
        return cls(
            video_id=video.id,
            title=video.title,
            channel_title=video.channel_title,
            thumbnail_url=video.thumbnail_url,
            published_at=video.published_at,
            duration_raw=video.duration_raw,
            duration_seconds=video.duration_seconds,
            duration_formatted=format_short(video.duration_seconds),
            view_count=video.view_count,
            url=video.watch_url,
        )


class SpeedProjectionResponse(BaseModel):
    """Playback time at a given speed."""

    speed: float = Field(..., examples=[1.5])
    label: str = Field(..., examples=["1.5x"])
    duration_seconds: int = Field(..., examples=[2400])
    formatted: str = Field(..., examples=["40m"])
    time_saved_seconds: int = Field(..., examples=[1200])
    time_saved_formatted: str = Field(..., examples=["20m"])

    @classmethod
    def from_projection(
        cls, projection: SpeedProjection, base_seconds: int, label: str
    ) -> "SpeedProjectionResponse":
        saved = base_seconds - projection.projected_duration_seconds
        return cls(
            speed=projection.speed_multiplier,
            label=label,
            duration_seconds=projection.projected_duration_seconds,
            formatted=projection.formatted,
            time_saved_seconds=saved,
            # Slower than 1x saves nothing; the negative seconds value stays as is
            time_saved_formatted=format_long(max(saved, 0)).formatted,
        )


class StatsResponse(BaseModel):
    """Aggregate statistics for a playlist.

    For an empty playlist the average and both extremes are null.
    """

    total_videos: int = Field(..., examples=[12])
    total_duration_seconds: int = Field(..., examples=[3600])
    total_duration_formatted: str = Field(..., examples=["1h"])
    total_views: int = Field(..., examples=[123456])
    average_duration_seconds: Optional[int] = Field(None, examples=[300])
    average_duration_formatted: Optional[str] = Field(None, examples=["5:00"])
    longest_video: Optional[VideoResponse] = None
    shortest_video: Optional[VideoResponse] = None

    @classmethod
    def from_stats(cls, stats: PlaylistStats) -> "StatsResponse":
        average = stats.average_duration_seconds
        return cls(
            total_videos=stats.total_videos,
            total_duration_seconds=stats.total_duration_seconds,
            total_duration_formatted=format_long(stats.total_duration_seconds).formatted,
            total_views=stats.total_views,
            average_duration_seconds=average,
            average_duration_formatted=format_short(average) if average is not None else None,
            longest_video=(
                VideoResponse.from_record(stats.longest_video) if stats.longest_video else None
            ),
            shortest_video=(
                VideoResponse.from_record(stats.shortest_video) if stats.shortest_video else None
            ),
        )


class PlaylistSummary(BaseModel):
    """Playlist metadata without its videos."""

    playlist_id: str = Field(..., examples=["PLBCF2DAC6FFB574DE"])
    title: str = Field(..., examples=["Lecture series"])
    description: str = Field("", examples=["All lectures of the course"])
    channel_title: str = Field(..., examples=["Some University"])
    thumbnail_url: str = Field(..., examples=["https://i.ytimg.com/vi/abc/hqdefault.jpg"])
    item_count: int = Field(
        ..., description="Entry count reported upstream (may include unavailable entries)", examples=[12]
    )
    published_at: str = Field(..., examples=["2015-03-01T12:00:00Z"])
    url: str = Field(..., examples=["https://youtube.com/playlist?list=PLBCF2DAC6FFB574DE"])

    @classmethod
    def from_aggregate(cls, aggregate: PlaylistAggregate) -> "PlaylistSummary":
        return cls(
            playlist_id=aggregate.id,
            title=aggregate.title,
            description=aggregate.description,
            channel_title=aggregate.channel_title,
            thumbnail_url=aggregate.thumbnail_url,
            item_count=aggregate.item_count,
            published_at=aggregate.published_at,
            url=aggregate.url,
        )


class PlaylistResponse(BaseModel):
    """Full playlist analysis response."""

    playlist: PlaylistSummary
    videos: List[VideoResponse]
    stats: StatsResponse
    speeds: List[SpeedProjectionResponse] = Field(
        default_factory=list, description="Projections at the standard playback speeds"
    )


class VideoListResponse(BaseModel):
    """Filtered and sorted view of a playlist's videos."""

    playlist_id: str = Field(..., examples=["PLBCF2DAC6FFB574DE"])
    total: int = Field(..., description="Videos in the playlist", examples=[12])
    count: int = Field(..., description="Videos matching the search", examples=[3])
    videos: List[VideoResponse]


class DurationFormatResponse(BaseModel):
    """Short and long renderings of a duration."""

    seconds: int = Field(..., examples=[90061])
    short: str = Field(..., examples=["25:01:01"])
    long: str = Field(..., examples=["1d 1h 1m 1s"])
    days: int = Field(..., examples=[1])
    hours: int = Field(..., examples=[1])
    minutes: int = Field(..., examples=[1])
    remaining_seconds: int = Field(..., examples=[1])


class TabularExportResponse(BaseModel):
    """Rows of the spreadsheet export, one list per sheet.

    The body is JSON. Writing the workbook is left to the client, which can
    save it under the suggested filename.
    """

    suggested_spreadsheet_filename: str = Field(
        ...,
        description="Filename to use when the client writes these rows to an .xlsx workbook",
        examples=["lecture_series_analysis.xlsx"],
    )
    summary: List[List[Any]]
    videos: List[List[Any]]
    speed_comparison: List[List[Any]]


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    version: Optional[str] = Field(default=None, examples=["v3"])
    details: Optional[Dict[str, Any]] = Field(default=None, examples=[{"latency_ms": 150}])


class HealthResponse(BaseModel):
    """Detailed health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., examples=["healthy"])
    timestamp: str = Field(..., examples=["2025-12-25T10:30:00Z"])
    version: str = Field(..., examples=["1.0.0"])
    uptime_seconds: float = Field(..., examples=[3600.5])
    test_mode: bool = Field(False, examples=[False])
    components: Dict[str, ComponentHealth]


class LivenessResponse(BaseModel):
    """Simple liveness check response for container orchestration."""

    status: Literal["alive"] = Field(..., examples=["alive"])


class ReadinessResponse(BaseModel):
    """Readiness check response for load balancer integration."""

    status: Literal["ready", "not_ready"] = Field(..., examples=["ready"])
    ready: bool = Field(..., examples=[True])
    message: Optional[str] = Field(default=None, examples=["YouTube API key not configured"])


class ErrorDetail(BaseModel):
    """Structured error response.

    All API errors follow this format with machine-readable error codes
    and optional suggestions for resolution.
    """

    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["INVALID_URL", "PLAYLIST_NOT_FOUND", "UPSTREAM_ERROR"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Playlist not found or is private: PLxyz"],
    )
    details: Optional[str] = Field(
        None,
        description="Additional error context",
        examples=["Expected format: https://www.youtube.com/playlist?list=PLAYLIST_ID"],
    )
    timestamp: str = Field(..., examples=["2025-12-25T10:30:00Z"])
    request_id: Optional[str] = Field(
        None,
        description="Request ID for tracing",
        examples=["req_550e8400e29b"],
    )
    suggestion: Optional[str] = Field(
        None,
        description="Suggested action to resolve the error",
        examples=["The playlist may be private, deleted, or the ID may be mistyped"],
    )
