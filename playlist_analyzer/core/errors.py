"""Error codes and the JSON error envelope.

Every failure leaving the API is rendered as an ErrorDetail body with a
machine-readable code, a message and, where one helps, a suggestion.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Type

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from playlist_analyzer.core.logging import get_request_id
from playlist_analyzer.core.metrics import MetricsCollector
from playlist_analyzer.providers.exceptions import (
    FetchCancelledError,
    InvalidPlaylistURLError,
    PlaylistNotFoundError,
    ProviderError,
    UpstreamError,
)

logger = structlog.get_logger(__name__)


class ErrorCode:
    """Machine-readable codes carried in every error body."""

    # Bad input
    INVALID_URL = "INVALID_URL"
    INVALID_SPEED = "INVALID_SPEED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_FAILED = "AUTH_FAILED"
    PLAYLIST_NOT_FOUND = "PLAYLIST_NOT_FOUND"

    # YouTube or the service itself failed
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    FETCH_CANCELLED = "FETCH_CANCELLED"
    MISSING_API_KEY = "MISSING_API_KEY"


ERROR_CODE_TO_STATUS: Dict[str, int] = {
    ErrorCode.INVALID_URL: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_SPEED: HTTP_400_BAD_REQUEST,
    ErrorCode.AUTH_FAILED: HTTP_401_UNAUTHORIZED,
    ErrorCode.PLAYLIST_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION_ERROR: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.PROVIDER_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.UPSTREAM_ERROR: HTTP_502_BAD_GATEWAY,
    ErrorCode.FETCH_CANCELLED: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.MISSING_API_KEY: HTTP_503_SERVICE_UNAVAILABLE,
}


# Hints shown to the caller next to the message
ERROR_SUGGESTIONS: Dict[str, str] = {
    ErrorCode.INVALID_URL: (
        "Provide a YouTube playlist URL containing a 'list=' parameter "
        "(e.g. https://www.youtube.com/playlist?list=PL...)"
    ),
    ErrorCode.INVALID_SPEED: "Choose a playback speed between 0.25 and 3.0",
    ErrorCode.VALIDATION_ERROR: "See /docs for the accepted query parameters",
    ErrorCode.AUTH_FAILED: "Send one of the configured keys in the X-API-Key header",
    ErrorCode.PLAYLIST_NOT_FOUND: "The playlist may be private, deleted, or the ID may be mistyped",
    ErrorCode.UPSTREAM_ERROR: (
        "Failed to fetch playlist information from YouTube. Please try again later"
    ),
    ErrorCode.PROVIDER_ERROR: "Fetching the playlist failed unexpectedly. Retry the request",
    ErrorCode.INTERNAL_ERROR: "Retry the request and report the request_id if it keeps failing",
    ErrorCode.FETCH_CANCELLED: "The playlist fetch was cancelled. Retry the request",
    ErrorCode.MISSING_API_KEY: "The server has no YouTube Data API key (APP_YOUTUBE_API_KEY)",
}


# Provider exception to error code, checked in insertion order
EXCEPTION_TO_ERROR_CODE: Dict[Type[Exception], str] = {
    InvalidPlaylistURLError: ErrorCode.INVALID_URL,
    PlaylistNotFoundError: ErrorCode.PLAYLIST_NOT_FOUND,
    UpstreamError: ErrorCode.UPSTREAM_ERROR,
    FetchCancelledError: ErrorCode.FETCH_CANCELLED,
    # Base class last
    ProviderError: ErrorCode.PROVIDER_ERROR,
}


class APIError(Exception):
    """An error raised by a route with an explicit error code.

    The global handler renders it with the status mapped from the code.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details
        # Fall back to the stock hint for the code
        self.suggestion = suggestion or ERROR_SUGGESTIONS.get(error_code)
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_CODE_TO_STATUS.get(self.error_code, HTTP_500_INTERNAL_SERVER_ERROR)


def map_exception_to_api_error(exc: Exception) -> APIError:
    """Translate a provider exception into an APIError.

    Anything that is not a ProviderError becomes INTERNAL_ERROR with a
    generic message, so internal details never reach the client.
    """
    for exc_type, error_code in EXCEPTION_TO_ERROR_CODE.items():
        if isinstance(exc, exc_type):
            return APIError(error_code, str(exc))
    return APIError(ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


def _build_error_response(
    error_code: str,
    message: str,
    details: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> Dict[str, Any]:
    """Assemble an ErrorDetail body, stamped with the time and request ID."""
    body: Dict[str, Any] = {
        "error_code": error_code,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    optional = {
        "details": details,
        "request_id": get_request_id(),
        "suggestion": suggestion,
    }
    body.update({key: value for key, value in optional.items() if value})
    return body


def _from_http_exception(exc: HTTPException) -> APIError:
    # Auth failures carry a structured detail; plain ones get a code from the status
    if isinstance(exc.detail, dict) and "error_code" in exc.detail:
        error_code = exc.detail["error_code"]
        message = exc.detail.get("message", str(exc.detail))
        details = exc.detail.get("details")
    else:
        error_code = _status_to_error_code(exc.status_code)
        message = str(exc.detail) if exc.detail else "An error occurred"
        details = None
    return APIError(error_code, message, details=details)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any exception as an ErrorDetail JSON response.

    APIError and HTTPException keep their own status. Provider exceptions
    are mapped through EXCEPTION_TO_ERROR_CODE, and anything else becomes a
    500 whose message hides the cause.

    Args:
        request: The request being served.
        exc: The exception that escaped the route.

    Returns:
        JSONResponse carrying the ErrorDetail body.
    """
    path = request.url.path

    if isinstance(exc, APIError):
        api_error = exc
        status_code = exc.status_code
        logger.warning("api_error", error_code=exc.error_code, message=exc.message, path=path)

    elif isinstance(exc, HTTPException):
        api_error = _from_http_exception(exc)
        status_code = exc.status_code
        logger.warning(
            "http_exception",
            status_code=status_code,
            error_code=api_error.error_code,
            path=path,
        )

    elif isinstance(exc, ProviderError):
        api_error = map_exception_to_api_error(exc)
        status_code = api_error.status_code
        logger.warning(
            "provider_error",
            error_code=api_error.error_code,
            error_type=type(exc).__name__,
            message=str(exc),
            path=path,
        )

    else:
        api_error = map_exception_to_api_error(exc)
        status_code = HTTP_500_INTERNAL_SERVER_ERROR
        logger.error(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error=str(exc),
            path=path,
            exc_info=True,
        )

    body = _build_error_response(
        error_code=api_error.error_code,
        message=api_error.message,
        details=api_error.details,
        suggestion=api_error.suggestion,
    )

    # Label by route template; unmatched paths share one series
    route = request.scope.get("route")
    MetricsCollector.record_error(api_error.error_code, route.path if route else "/unmatched")

    return JSONResponse(status_code=status_code, content=body)


_STATUS_TO_ERROR_CODE: Dict[int, str] = {
    HTTP_400_BAD_REQUEST: ErrorCode.INVALID_URL,
    HTTP_401_UNAUTHORIZED: ErrorCode.AUTH_FAILED,
    HTTP_404_NOT_FOUND: ErrorCode.PLAYLIST_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_ERROR,
    HTTP_502_BAD_GATEWAY: ErrorCode.UPSTREAM_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.MISSING_API_KEY,
}


def _status_to_error_code(status_code: int) -> str:
    """Infer an error code from a bare HTTP status."""
    return _STATUS_TO_ERROR_CODE.get(status_code, ErrorCode.INTERNAL_ERROR)
