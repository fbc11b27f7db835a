"""Tests for the playlist fetcher.

The fetcher runs against the real YouTubeDataClient with an
httpx.MockTransport serving the demo fixtures, so pagination, filtering
and error mapping are exercised through the same code path as production.
"""

from typing import Callable, List

import httpx
import pytest

from playlist_analyzer.core.config import YouTubeConfig
from playlist_analyzer.providers.exceptions import (
    FetchCancelledError,
    PlaylistNotFoundError,
    UpstreamError,
)
from playlist_analyzer.providers.youtube import YouTubeDataClient
from playlist_analyzer.services.fetcher import CancellationToken, PlaylistFetcher
from playlist_analyzer.testing.fixtures import (
    DEMO_PLAYLIST_ID,
    EMPTY_PLAYLIST_ID,
    QUOTA_PLAYLIST_ID,
    SECOND_PAGE_TOKEN,
)
from playlist_analyzer.testing.mock_api import handle_request

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def youtube_config() -> YouTubeConfig:
    return YouTubeConfig(api_key="unit-test-key", base_url="https://api.test/youtube/v3")


@pytest.fixture
def recorded() -> List[httpx.Request]:
    """Requests seen by the mock transport, in order."""
    return []


@pytest.fixture
def make_fetcher(
    youtube_config: YouTubeConfig, recorded: List[httpx.Request]
) -> Callable[..., PlaylistFetcher]:
    """Build a fetcher whose transport records requests and defers to a handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response] = handle_request) -> PlaylistFetcher:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded.append(request)
            return handler(request)

        client = YouTubeDataClient(youtube_config, transport=httpx.MockTransport(recording_handler))
        return PlaylistFetcher(client, page_size=youtube_config.page_size)

    return factory


def resource_of(request: httpx.Request) -> str:
    return request.url.path.rsplit("/", 1)[-1]


# ============================================================================
# Successful fetches
# ============================================================================


class TestFetch:
    """Tests for PlaylistFetcher.fetch()."""

    @pytest.mark.asyncio
    async def test_assembles_demo_playlist(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        aggregate = await make_fetcher().fetch(DEMO_PLAYLIST_ID)

        assert aggregate.id == DEMO_PLAYLIST_ID
        assert aggregate.title == "Demo Course: Python Basics"
        assert aggregate.channel_title == "Demo Channel"
        assert aggregate.item_count == 5
        assert aggregate.thumbnail_url.endswith("/hqdefault.jpg")
        assert aggregate.total_duration_seconds == 253 + 3730 + 59 + 600

    @pytest.mark.asyncio
    async def test_preserves_membership_order_across_pages(
        self, make_fetcher: Callable[..., PlaylistFetcher]
    ) -> None:
        aggregate = await make_fetcher().fetch(DEMO_PLAYLIST_ID)

        assert [v.id for v in aggregate.videos] == [
            "dQw4w9WgXcQ",
            "9bZkp7q19f0",
            "jNQXAC9IVRw",
            "kJQP7kiw5Fk",
        ]

    @pytest.mark.asyncio
    async def test_detail_response_order_does_not_matter(
        self, make_fetcher: Callable[..., PlaylistFetcher]
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            response = handle_request(request)
            if resource_of(request) != "videos":
                return response
            body = response.json()
            return httpx.Response(200, json={**body, "items": list(reversed(body["items"]))})

        aggregate = await make_fetcher(handler).fetch(DEMO_PLAYLIST_ID)

        assert [v.id for v in aggregate.videos] == [
            "dQw4w9WgXcQ",
            "9bZkp7q19f0",
            "jNQXAC9IVRw",
            "kJQP7kiw5Fk",
        ]

    @pytest.mark.asyncio
    async def test_ids_without_detail_item_are_skipped(
        self, make_fetcher: Callable[..., PlaylistFetcher]
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            response = handle_request(request)
            if resource_of(request) != "videos":
                return response
            body = response.json()
            items = [item for item in body["items"] if item["id"] != "9bZkp7q19f0"]
            return httpx.Response(200, json={**body, "items": items})

        aggregate = await make_fetcher(handler).fetch(DEMO_PLAYLIST_ID)

        assert [v.id for v in aggregate.videos] == ["dQw4w9WgXcQ", "jNQXAC9IVRw", "kJQP7kiw5Fk"]

    @pytest.mark.asyncio
    async def test_non_numeric_item_count(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            response = handle_request(request)
            if resource_of(request) != "playlists":
                return response
            body = response.json()
            body["items"][0]["contentDetails"]["itemCount"] = "many"
            return httpx.Response(200, json=body)

        aggregate = await make_fetcher(handler).fetch(DEMO_PLAYLIST_ID)

        assert aggregate.item_count == 0
        assert len(aggregate.videos) == 4

    @pytest.mark.asyncio
    async def test_skips_non_video_entries(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        aggregate = await make_fetcher().fetch(DEMO_PLAYLIST_ID)

        assert len(aggregate.videos) == 4
        assert aggregate.item_count > len(aggregate.videos)

    @pytest.mark.asyncio
    async def test_video_without_statistics(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        aggregate = await make_fetcher().fetch(DEMO_PLAYLIST_ID)
        recap = next(v for v in aggregate.videos if v.id == "jNQXAC9IVRw")

        assert recap.view_count is None
        assert recap.duration_seconds == 59
        assert recap.thumbnail_url.endswith("/mqdefault.jpg")

    @pytest.mark.asyncio
    async def test_requests_are_sequential_and_paginated(
        self, make_fetcher: Callable[..., PlaylistFetcher], recorded: List[httpx.Request]
    ) -> None:
        await make_fetcher().fetch(DEMO_PLAYLIST_ID)

        assert [resource_of(r) for r in recorded] == [
            "playlists",
            "playlistItems",
            "videos",
            "playlistItems",
            "videos",
        ]
        assert "pageToken" not in recorded[1].url.params
        assert recorded[3].url.params["pageToken"] == SECOND_PAGE_TOKEN
        assert recorded[2].url.params["id"] == "dQw4w9WgXcQ,9bZkp7q19f0"

    @pytest.mark.asyncio
    async def test_credential_sent_on_every_request(
        self, make_fetcher: Callable[..., PlaylistFetcher], recorded: List[httpx.Request]
    ) -> None:
        await make_fetcher().fetch(DEMO_PLAYLIST_ID)

        assert all(r.url.params["key"] == "unit-test-key" for r in recorded)
        assert all(r.url.params["maxResults"] == "50" for r in recorded if resource_of(r) == "playlistItems")

    @pytest.mark.asyncio
    async def test_empty_playlist(
        self, make_fetcher: Callable[..., PlaylistFetcher], recorded: List[httpx.Request]
    ) -> None:
        aggregate = await make_fetcher().fetch(EMPTY_PLAYLIST_ID)

        assert aggregate.videos == ()
        assert aggregate.total_duration_seconds == 0
        # No detail lookup for a page without videos
        assert [resource_of(r) for r in recorded] == ["playlists", "playlistItems"]

    @pytest.mark.asyncio
    async def test_fetch_is_idempotent(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        fetcher = make_fetcher()

        first = await fetcher.fetch(DEMO_PLAYLIST_ID)
        second = await fetcher.fetch(DEMO_PLAYLIST_ID)

        assert first == second


class TestIterVideoPages:
    """Tests for lazy page iteration."""

    @pytest.mark.asyncio
    async def test_yields_one_tuple_per_page(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        pages = [page async for page in make_fetcher().iter_video_pages(DEMO_PLAYLIST_ID)]

        assert len(pages) == 2
        assert [v.id for v in pages[0]] == ["dQw4w9WgXcQ", "9bZkp7q19f0"]
        assert [v.id for v in pages[1]] == ["jNQXAC9IVRw", "kJQP7kiw5Fk"]

    @pytest.mark.asyncio
    async def test_next_page_requested_only_after_consumption(
        self, make_fetcher: Callable[..., PlaylistFetcher], recorded: List[httpx.Request]
    ) -> None:
        pages = make_fetcher().iter_video_pages(DEMO_PLAYLIST_ID)

        await pages.__anext__()
        assert [resource_of(r) for r in recorded] == ["playlistItems", "videos"]

        await pages.aclose()


# ============================================================================
# Failures
# ============================================================================


class TestFetchErrors:
    """Tests for error propagation."""

    @pytest.mark.asyncio
    async def test_unknown_playlist_is_not_found(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        with pytest.raises(PlaylistNotFoundError, match="not found or is private"):
            await make_fetcher().fetch("PLdoesNotExist")

    @pytest.mark.asyncio
    async def test_error_status_mid_pagination(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        with pytest.raises(UpstreamError) as exc_info:
            await make_fetcher().fetch(QUOTA_PLAYLIST_ID)

        assert exc_info.value.status_code == 403
        assert "quota" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_on_second_page_discards_partial_result(
        self, make_fetcher: Callable[..., PlaylistFetcher]
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("pageToken") == SECOND_PAGE_TOKEN:
                return httpx.Response(500, json={"error": {"message": "Backend Error"}})
            return handle_request(request)

        with pytest.raises(UpstreamError) as exc_info:
            await make_fetcher(handler).fetch(DEMO_PLAYLIST_ID)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_timeout_becomes_upstream_error(self, make_fetcher: Callable[..., PlaylistFetcher]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamError, match="timed out"):
            await make_fetcher(handler).fetch(DEMO_PLAYLIST_ID)

    @pytest.mark.asyncio
    async def test_non_object_detail_body_is_upstream_error(
        self, make_fetcher: Callable[..., PlaylistFetcher]
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if resource_of(request) == "videos":
                return httpx.Response(200, json=["dQw4w9WgXcQ"])
            return handle_request(request)

        with pytest.raises(UpstreamError, match="expected a JSON object"):
            await make_fetcher(handler).fetch(DEMO_PLAYLIST_ID)


class TestCancellation:
    """Tests for cooperative cancellation."""

    def test_token_starts_uncancelled(self) -> None:
        token = CancellationToken()

        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel_sets_flag(self) -> None:
        token = CancellationToken()
        token.cancel()

        assert token.cancelled
        with pytest.raises(FetchCancelledError):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_cancelled_before_start_makes_no_requests(
        self, make_fetcher: Callable[..., PlaylistFetcher], recorded: List[httpx.Request]
    ) -> None:
        token = CancellationToken()
        token.cancel()

        with pytest.raises(FetchCancelledError):
            await make_fetcher().fetch(DEMO_PLAYLIST_ID, cancel_token=token)

        assert recorded == []

    @pytest.mark.asyncio
    async def test_cancel_mid_fetch_stops_further_requests(
        self, make_fetcher: Callable[..., PlaylistFetcher], recorded: List[httpx.Request]
    ) -> None:
        token = CancellationToken()

        def handler(request: httpx.Request) -> httpx.Response:
            if resource_of(request) == "playlistItems":
                token.cancel()
            return handle_request(request)

        with pytest.raises(FetchCancelledError):
            await make_fetcher(handler).fetch(DEMO_PLAYLIST_ID, cancel_token=token)

        assert [resource_of(r) for r in recorded] == ["playlists", "playlistItems"]
