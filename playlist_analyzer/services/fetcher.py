"""Playlist fetcher.

Drives the paginated retrieval of a playlist: metadata first, then every
membership page, then one batched video-detail lookup per page. Pages are
fetched strictly in sequence so membership order is preserved and at most
one upstream request is outstanding at a time.
"""

import time
from typing import AsyncIterator, List, Optional, Tuple

import structlog

from playlist_analyzer.core.metrics import MetricsCollector
from playlist_analyzer.models.playlist import PlaylistAggregate, VideoRecord, pick_thumbnail
from playlist_analyzer.providers.base import PlaylistSource
from playlist_analyzer.providers.exceptions import (
    FetchCancelledError,
    PlaylistNotFoundError,
    UpstreamError,
)

logger = structlog.get_logger(__name__)

VIDEO_RESOURCE_KIND = "youtube#video"


class CancellationToken:
    """Cooperative cancellation flag checked before every upstream call."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        """
        Abort the current fetch if cancellation was requested.

        Raises:
            FetchCancelledError: If cancel() has been called
        """
        if self._cancelled:
            raise FetchCancelledError("Playlist fetch was cancelled")


class PlaylistFetcher:
    """Assembles a PlaylistAggregate from a PlaylistSource.

    Holds no per-fetch state: each call builds its own buffer, so
    concurrent fetches (even for the same playlist) are independent.
    """

    def __init__(self, source: PlaylistSource, page_size: int = 50):
        """
        Initialize the fetcher.

        Args:
            source: Upstream playlist data source
            page_size: Membership entries per page (1-50)
        """
        self.source = source
        self.page_size = page_size

    async def fetch(
        self, playlist_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> PlaylistAggregate:
        """
        Fetch a playlist and all of its videos.

        Args:
            playlist_id: Playlist identifier (already extracted from the URL)
            cancel_token: Optional token to abort the fetch between requests

        Returns:
            The assembled PlaylistAggregate

        Raises:
            PlaylistNotFoundError: If the playlist is private, deleted or missing
            UpstreamError: If any upstream call fails
            FetchCancelledError: If the token is cancelled before completion
        """
        token = cancel_token or CancellationToken()
        start_time = time.time()
        logger.info("playlist_fetch_started", playlist_id=playlist_id)

        try:
            token.raise_if_cancelled()
            playlist = await self.source.get_playlist(playlist_id)

            videos: List[VideoRecord] = []
            async for page in self.iter_video_pages(playlist_id, token):
                videos.extend(page)

            # Last check so a cancel during the final request still discards the result
            token.raise_if_cancelled()
        except PlaylistNotFoundError:
            MetricsCollector.record_playlist_fetch("not_found", time.time() - start_time)
            raise
        except UpstreamError as e:
            MetricsCollector.record_playlist_fetch("upstream_error", time.time() - start_time)
            logger.warning(
                "playlist_fetch_failed",
                playlist_id=playlist_id,
                error=str(e),
                status_code=e.status_code,
            )
            raise
        except FetchCancelledError:
            MetricsCollector.record_playlist_fetch("cancelled", time.time() - start_time)
            logger.info("playlist_fetch_cancelled", playlist_id=playlist_id)
            raise

        aggregate = self._assemble(playlist_id, playlist, videos)
        duration = time.time() - start_time
        MetricsCollector.record_playlist_fetch("success", duration, len(aggregate.videos))

        logger.info(
            "playlist_fetch_completed",
            playlist_id=playlist_id,
            item_count=aggregate.item_count,
            video_count=len(aggregate.videos),
            total_duration_seconds=aggregate.total_duration_seconds,
            duration=round(duration, 3),
        )
        return aggregate

    async def iter_video_pages(
        self, playlist_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> AsyncIterator[Tuple[VideoRecord, ...]]:
        """
        Yield the playlist's videos one membership page at a time, in order.

        The next page is only requested after the caller has consumed the
        current one.

        Args:
            playlist_id: Playlist identifier
            cancel_token: Optional token checked before each request

        Yields:
            Tuple of VideoRecord for each page (possibly empty)

        Raises:
            UpstreamError: If any upstream call fails
            FetchCancelledError: If the token is cancelled
        """
        token = cancel_token or CancellationToken()
        page_token: Optional[str] = None
        page_number = 0

        while True:
            token.raise_if_cancelled()
            page = await self.source.list_playlist_items(
                playlist_id, page_token=page_token, max_results=self.page_size
            )
            page_number += 1

            items = page.get("items") or []
            video_ids = self._video_ids(items)

            records: Tuple[VideoRecord, ...] = ()
            if video_ids:
                token.raise_if_cancelled()
                details = await self.source.list_videos(video_ids)
                records = self._in_membership_order(video_ids, details)

            logger.debug(
                "playlist_page_fetched",
                playlist_id=playlist_id,
                page=page_number,
                entries=len(items),
                videos=len(records),
                skipped=len(items) - len(video_ids),
            )

            yield records

            page_token = page.get("nextPageToken")
            if not page_token:
                break

    def _video_ids(self, items: List[dict]) -> List[str]:
        """Video ids of the membership entries that reference a video."""
        video_ids = []
        for item in items:
            resource = (item.get("snippet") or {}).get("resourceId") or {}
            if resource.get("kind") == VIDEO_RESOURCE_KIND and resource.get("videoId"):
                video_ids.append(resource["videoId"])
        return video_ids

    def _in_membership_order(
        self, video_ids: List[str], details: List[dict]
    ) -> Tuple[VideoRecord, ...]:
        """Records ordered by video_ids; ids with no detail item are dropped."""
        by_id = {item.get("id"): item for item in details}
        return tuple(
            VideoRecord.from_api_item(by_id[video_id])
            for video_id in video_ids
            if video_id in by_id
        )

    def _assemble(
        self, playlist_id: str, playlist: dict, videos: List[VideoRecord]
    ) -> PlaylistAggregate:
        snippet = playlist.get("snippet") or {}
        content_details = playlist.get("contentDetails") or {}

        return PlaylistAggregate(
            id=playlist.get("id") or playlist_id,
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            channel_title=snippet.get("channelTitle", ""),
            thumbnail_url=pick_thumbnail(snippet.get("thumbnails") or {}, "high"),
            item_count=_parse_item_count(content_details.get("itemCount")),
            published_at=snippet.get("publishedAt", ""),
            videos=tuple(videos),
        )


def _parse_item_count(value: object) -> int:
    """Upstream itemCount as an int, 0 when absent or not a number."""
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0
