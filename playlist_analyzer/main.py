"""Application factory and process entry point.

Startup loads the configuration, then builds one YouTube client and one
PlaylistFetcher shared by every request. In test mode the client talks to
the bundled demo transport instead of the network.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from playlist_analyzer import __version__
from playlist_analyzer.api import export, health, metrics, playlist
from playlist_analyzer.core.config import (
    AnalysisConfig,
    Config,
    ConfigService,
    MonitoringConfig,
    SecurityConfig,
    ServerConfig,
    is_test_mode,
)
from playlist_analyzer.core.errors import APIError, global_exception_handler
from playlist_analyzer.core.logging import configure_logging
from playlist_analyzer.core.metrics import MetricsCollector, initialize_metrics
from playlist_analyzer.middleware.auth import configure_auth
from playlist_analyzer.middleware.request_id import RequestIDMiddleware
from playlist_analyzer.providers.exceptions import ProviderError
from playlist_analyzer.providers.youtube import YouTubeDataClient
from playlist_analyzer.services.fetcher import PlaylistFetcher

logger = structlog.get_logger(__name__)

# Credential used against the demo transport when none is configured
TEST_MODE_API_KEY = "test-mode-key"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Counts and times every request under its route template."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.time()
        response = await call_next(request)

        # Raw paths would give one series per playlist id
        route = request.scope.get("route")
        MetricsCollector.record_request(
            method=request.method,
            endpoint=route.path if route else "/unmatched",
            status=response.status_code,
            duration=time.time() - started,
        )
        return response


# Set during lifespan startup
_config: Config | None = None
_youtube_client: YouTubeDataClient | None = None
_playlist_fetcher: PlaylistFetcher | None = None
_test_mode: bool = False


def get_config() -> Config:
    if _config is None:
        raise RuntimeError("Configuration not loaded")
    return _config


def get_playlist_fetcher() -> PlaylistFetcher:
    if _playlist_fetcher is None:
        raise RuntimeError("Playlist fetcher not configured")
    return _playlist_fetcher


def get_analysis_config() -> AnalysisConfig:
    return get_config().analysis


def get_test_mode() -> bool:
    """Whether the running application serves demo data."""
    return _test_mode


def _load_config(test_mode: bool) -> Config:
    """Load and validate the configuration, filling the demo key in test mode."""
    config_service = ConfigService()
    config = config_service.load()
    configure_logging(config.logging.level, config.logging.format)

    if test_mode and not config.youtube.api_key:
        config.youtube = config.youtube.model_copy(update={"api_key": TEST_MODE_API_KEY})

    try:
        config_service.validate()
    except ValueError as e:
        logger.error("Configuration invalid", error=str(e))
        raise

    if not config.youtube.api_key:
        logger.warning("Starting in degraded mode without a YouTube API key")
    return config


def _build_client(config: Config, test_mode: bool) -> YouTubeDataClient:
    transport = None
    if test_mode:
        from playlist_analyzer.testing.mock_api import create_demo_transport

        transport = create_demo_transport()
        logger.warning("Test mode enabled, serving demo playlist data")
    return YouTubeDataClient(config.youtube, transport=transport)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the shared services on startup and release them on shutdown."""
    global _config, _youtube_client, _playlist_fetcher, _test_mode

    logger.info("Application starting", version=__version__)
    initialize_metrics(__version__)

    _test_mode = is_test_mode()
    _config = _load_config(_test_mode)
    logger.info(
        "Configuration loaded",
        server_port=_config.server.port,
        page_size=_config.youtube.page_size,
        test_mode=_test_mode,
    )

    configure_auth(api_keys=_config.security.api_keys)

    client = _build_client(_config, _test_mode)
    _youtube_client = client
    _playlist_fetcher = PlaylistFetcher(client, page_size=_config.youtube.page_size)

    logger.info("Application ready", version=__version__)

    yield

    logger.info("Application shutting down")
    _playlist_fetcher = None
    _youtube_client = None
    await client.close()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """Assemble middleware, error handlers and routers around the lifespan."""
    app = FastAPI(
        title="Playlist Analyzer API",
        description="Duration analytics and report exports for YouTube playlists",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Browsers need the filename and request ID headers exposed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=SecurityConfig().cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )
    app.add_middleware(MetricsMiddleware)
    # Outermost, so every log line and error body carries the ID
    app.add_middleware(RequestIDMiddleware)

    # ProviderError is registered on its own so it is handled inside the
    # middleware stack rather than by the outer server error handler
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(APIError, global_exception_handler)
    app.add_exception_handler(ProviderError, global_exception_handler)

    app.dependency_overrides[playlist.get_playlist_fetcher] = get_playlist_fetcher
    app.dependency_overrides[playlist.get_analysis_config] = get_analysis_config

    app.include_router(health.router)
    app.include_router(playlist.router)
    app.include_router(export.router)
    if MonitoringConfig().metrics_enabled:
        app.include_router(metrics.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn  # type: ignore[import-not-found]

    server = ServerConfig()
    uvicorn.run(app, host=server.host, port=server.port)
