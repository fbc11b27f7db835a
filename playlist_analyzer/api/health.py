"""Health, liveness and readiness endpoints.

The detailed report covers two components: the configuration (is a
YouTube credential present) and connectivity to the YouTube Data API.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from playlist_analyzer import __version__
from playlist_analyzer.api.schemas import (
    ComponentHealth,
    HealthResponse,
    LivenessResponse,
    ReadinessResponse,
)
from playlist_analyzer.core.config import Config
from playlist_analyzer.services.fetcher import PlaylistFetcher

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])

# Upper bound for the connectivity check, in seconds
CONNECTIVITY_TIMEOUT = 2.0

_started_at = time.time()


def _unhealthy(error: str) -> ComponentHealth:
    return ComponentHealth(status="unhealthy", details={"error": error})


# The accessors live in main, which imports this module
def _get_config() -> Optional[Config]:
    from playlist_analyzer.main import get_config

    try:
        return get_config()
    except RuntimeError:
        return None


def _get_fetcher() -> Optional[PlaylistFetcher]:
    from playlist_analyzer.main import get_playlist_fetcher

    try:
        return get_playlist_fetcher()
    except RuntimeError:
        return None


def _test_mode() -> bool:
    from playlist_analyzer.main import get_test_mode

    return get_test_mode()


def _check_configuration() -> ComponentHealth:
    """Check that the upstream client is configured with a credential."""
    config = _get_config()
    if config is None:
        return _unhealthy("Configuration not loaded")
    if not config.youtube.api_key:
        return _unhealthy("YouTube API key not configured")

    return ComponentHealth(
        status="healthy",
        details={"page_size": config.youtube.page_size, "timeout": config.youtube.timeout},
    )


async def _check_youtube_connectivity() -> ComponentHealth:
    """Ping the YouTube Data API through the configured client."""
    fetcher = _get_fetcher()
    if fetcher is None:
        return _unhealthy("Playlist fetcher not configured")

    started = time.perf_counter()
    try:
        reachable = await asyncio.wait_for(fetcher.source.ping(), timeout=CONNECTIVITY_TIMEOUT)
    except asyncio.TimeoutError:
        return _unhealthy(f"YouTube connectivity test timed out (>{CONNECTIVITY_TIMEOUT:g}s)")

    if not reachable:
        return _unhealthy("YouTube connectivity test failed")

    latency_ms = int((time.perf_counter() - started) * 1000)
    return ComponentHealth(status="healthy", version="v3", details={"latency_ms": latency_ms})


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "Configuration and upstream API are healthy"},
        503: {"description": "At least one component is unhealthy"},
    },
)
async def health_check() -> JSONResponse:
    """
    Report the health of each component.

    Answers 503 when either the credential is missing or the YouTube
    Data API does not answer within two seconds.
    """
    components: Dict[str, ComponentHealth] = {
        "configuration": _check_configuration(),
        "youtube_connectivity": await _check_youtube_connectivity(),
    }
    healthy = all(component.status == "healthy" for component in components.values())

    report = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        uptime_seconds=round(time.time() - _started_at, 2),
        test_mode=_test_mode(),
        components=components,
    )

    logger.info(
        "health_check_completed",
        status=report.status,
        components={name: component.status for name, component in components.items()},
    )

    return JSONResponse(
        content=report.model_dump(),
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )


@router.get("/liveness", response_model=LivenessResponse)
async def liveness_check() -> LivenessResponse:
    """The process is up and serving requests."""
    return LivenessResponse(status="alive")


@router.get(
    "/readiness",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Playlists can be fetched"},
        503: {"description": "Fetcher or credential missing"},
    },
)
async def readiness_check() -> JSONResponse:
    """
    Ready once the fetcher is built and a YouTube credential is present.

    Does not call the upstream API.
    """
    problems: List[str] = []
    if _get_fetcher() is None:
        problems.append("Playlist fetcher not configured")
    if _check_configuration().status != "healthy":
        problems.append("YouTube API key not configured")

    if problems:
        body = ReadinessResponse(status="not_ready", ready=False, message="; ".join(problems))
        return JSONResponse(
            content=body.model_dump(), status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return JSONResponse(content=ReadinessResponse(status="ready", ready=True).model_dump())
