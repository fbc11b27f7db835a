"""Middleware package for the API."""

from playlist_analyzer.middleware.auth import APIKeyAuth, get_api_key, require_api_key
from playlist_analyzer.middleware.request_id import RequestIDMiddleware

__all__ = [
    "APIKeyAuth",
    "get_api_key",
    "require_api_key",
    "RequestIDMiddleware",
]
