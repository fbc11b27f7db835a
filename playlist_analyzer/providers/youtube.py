"""YouTube Data API v3 client."""

import time
from typing import Any, Dict, List, Optional

import httpx
import structlog

from playlist_analyzer.core.config import YouTubeConfig
from playlist_analyzer.core.logging import hash_api_key
from playlist_analyzer.core.metrics import MetricsCollector
from playlist_analyzer.providers.base import PlaylistSource
from playlist_analyzer.providers.exceptions import PlaylistNotFoundError, UpstreamError

logger = structlog.get_logger(__name__)


class YouTubeDataClient(PlaylistSource):
    """Thin async client over the playlists, playlistItems and videos resources.

    Every call is a single request: no retries, no caching. Any transport
    failure, timeout or non-success status is raised as UpstreamError.
    """

    # Maximum ids per videos.list call and items per playlistItems page
    MAX_BATCH_SIZE = 50

    def __init__(
        self,
        config: YouTubeConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Upstream API configuration (credential, base URL, timeout)
            transport: Optional httpx transport, used to serve canned responses
        """
        self.config = config
        self._api_key = config.api_key or ""
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

        logger.info(
            "YouTube data client initialized",
            base_url=config.base_url,
            timeout=config.timeout,
            key_hash=hash_api_key(self._api_key) if self._api_key else "none",
        )

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        data = await self._get(
            "playlists",
            {"part": "snippet,contentDetails", "id": playlist_id},
        )

        items = data.get("items") or []
        if not items:
            logger.info("playlist_not_found", playlist_id=playlist_id)
            raise PlaylistNotFoundError(f"Playlist not found or is private: {playlist_id}")

        return items[0]

    async def list_playlist_items(
        self, playlist_id: str, page_token: Optional[str] = None, max_results: int = 50
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "part": "snippet",
            "playlistId": playlist_id,
            "maxResults": min(max_results, self.MAX_BATCH_SIZE),
        }
        if page_token:
            params["pageToken"] = page_token

        return await self._get("playlistItems", params)

    async def list_videos(self, video_ids: List[str]) -> List[Dict[str, Any]]:
        if not video_ids:
            return []

        if len(video_ids) > self.MAX_BATCH_SIZE:
            raise ValueError(
                f"At most {self.MAX_BATCH_SIZE} video ids per request, got {len(video_ids)}"
            )

        data = await self._get(
            "videos",
            {"part": "snippet,contentDetails,statistics", "id": ",".join(video_ids)},
        )
        return data.get("items") or []

    async def ping(self) -> bool:
        """Cheap authenticated call used by health checks."""
        try:
            await self._get("i18nLanguages", {"part": "snippet", "hl": "en"})
            return True
        except UpstreamError as e:
            logger.warning("youtube_ping_failed", error=str(e), status_code=e.status_code)
            return False

    async def _get(self, resource: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Issue one GET request against the API.

        Args:
            resource: Resource path (e.g. "playlists")
            params: Query parameters, without the credential

        Returns:
            Decoded JSON body

        Raises:
            UpstreamError: On transport errors, timeouts, non-success status
                or an undecodable body
        """
        logger.debug("upstream_request", resource=resource, params=params)
        start_time = time.time()

        try:
            response = await self._client.get(resource, params={**params, "key": self._api_key})
        except httpx.TimeoutException as e:
            MetricsCollector.record_upstream_call(resource, "timeout", time.time() - start_time)
            logger.warning("upstream_timeout", resource=resource, error=str(e))
            raise UpstreamError(f"Request to {resource} timed out") from e
        except httpx.HTTPError as e:
            MetricsCollector.record_upstream_call(resource, "error", time.time() - start_time)
            logger.warning("upstream_transport_error", resource=resource, error=str(e))
            raise UpstreamError(f"Request to {resource} failed: {e}") from e

        duration = time.time() - start_time
        MetricsCollector.record_upstream_call(resource, str(response.status_code), duration)

        if not response.is_success:
            reason = self._error_reason(response)
            logger.warning(
                "upstream_error_status",
                resource=resource,
                status_code=response.status_code,
                reason=reason,
            )
            raise UpstreamError(
                f"Failed to fetch {resource}: HTTP {response.status_code} {reason}".rstrip(),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error("upstream_invalid_json", resource=resource, error=str(e))
            raise UpstreamError(f"Invalid JSON from {resource}") from e

        if not isinstance(data, dict):
            logger.error(
                "upstream_unexpected_body", resource=resource, body_type=type(data).__name__
            )
            raise UpstreamError(f"Unexpected response body from {resource}: expected a JSON object")

        logger.debug(
            "upstream_response",
            resource=resource,
            status_code=response.status_code,
            duration=round(duration, 3),
        )
        return data

    def _error_reason(self, response: httpx.Response) -> str:
        """Extract the API error message from an error response, if any."""
        try:
            error = response.json().get("error") or {}
        except (ValueError, AttributeError):
            return ""
        if isinstance(error, dict):
            return str(error.get("message", ""))
        return ""
