"""Prometheus collectors for the analyzer.

Four families: inbound HTTP traffic, calls to the YouTube Data API, whole
playlist fetches, and error bodies returned to clients.
"""

from prometheus_client import Counter, Histogram, Info

app_info = Info("playlist_analyzer", "Playlist analyzer build information")

# Inbound traffic, labelled by route template
http_requests_total = Counter(
    "http_requests_total",
    "Requests served, by method, route and status",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Time to serve a request",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

# YouTube Data API
upstream_requests_total = Counter(
    "upstream_requests_total",
    "Total upstream API calls by resource and outcome",
    ["resource", "status"],
)

upstream_request_duration_seconds = Histogram(
    "upstream_request_duration_seconds",
    "Upstream API call duration in seconds",
    ["resource"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Whole playlist fetches
playlist_fetches_total = Counter(
    "playlist_fetches_total",
    "Total playlist fetches by outcome",
    ["status"],
)

playlist_fetch_duration_seconds = Histogram(
    "playlist_fetch_duration_seconds",
    "Full playlist fetch duration in seconds",
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

playlist_videos = Histogram(
    "playlist_videos",
    "Number of videos per fetched playlist",
    buckets=[0, 10, 50, 100, 250, 500, 1000, 5000],
)

errors_total = Counter(
    "errors_total",
    "Error responses, by error code and route",
    ["error_code", "endpoint"],
)


class MetricsCollector:
    """Static helpers so callers never touch label sets directly."""

    @staticmethod
    def record_request(method: str, endpoint: str, status: int, duration: float) -> None:
        """Count one served request and observe its latency.

        Args:
            method: Request method.
            endpoint: Route template, or "/unmatched".
            status: Response status code.
            duration: Seconds spent serving the request.
        """
        http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    @staticmethod
    def record_upstream_call(resource: str, status: str, duration: float) -> None:
        """Record one upstream API call.

        Args:
            resource: API resource (playlists, playlistItems, videos).
            status: HTTP status code, or 'timeout' / 'error' for transport failures.
            duration: Call duration in seconds.
        """
        upstream_requests_total.labels(resource=resource, status=status).inc()
        upstream_request_duration_seconds.labels(resource=resource).observe(duration)

    @staticmethod
    def record_playlist_fetch(status: str, duration: float, video_count: int = 0) -> None:
        """Record a playlist fetch.

        Args:
            status: 'success', 'not_found', 'upstream_error' or 'cancelled'.
            duration: Fetch duration in seconds.
            video_count: Number of videos assembled (successful fetches only).
        """
        playlist_fetches_total.labels(status=status).inc()
        playlist_fetch_duration_seconds.observe(duration)
        if status == "success":
            playlist_videos.observe(video_count)

    @staticmethod
    def record_error(error_code: str, endpoint: str) -> None:
        errors_total.labels(error_code=error_code, endpoint=endpoint).inc()


def initialize_metrics(version: str) -> None:
    """Publish the running version on the info metric."""
    app_info.info({"version": version})
