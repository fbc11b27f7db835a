"""API key authentication dependencies.

Protected routes declare ``Depends(require_api_key)``. When no keys are
configured every request is let through.
"""

from typing import FrozenSet, List, Optional, Set

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from playlist_analyzer.core.logging import hash_api_key

logger = structlog.get_logger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"

# Missing headers reach require_api_key as None
api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


def _auth_failed(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error_code": "AUTH_FAILED", "message": message},
        headers={"WWW-Authenticate": "ApiKey"},
    )


class APIKeyAuth:
    """Validates API keys against the configured set."""

    # Health checks, docs and the scrape endpoint
    DEFAULT_EXCLUDED_PATHS: FrozenSet[str] = frozenset(
        {"/health", "/liveness", "/readiness", "/metrics", "/docs", "/redoc", "/openapi.json"}
    )

    def __init__(
        self,
        api_keys: Optional[List[str]] = None,
        excluded_paths: Optional[Set[str]] = None,
    ):
        """
        Args:
            api_keys: Client keys accepted in X-API-Key; none means open access
            excluded_paths: Health check and docs paths served without a key
        """
        self._api_keys: Set[str] = set(api_keys) if api_keys else set()
        self._excluded_paths = excluded_paths or self.DEFAULT_EXCLUDED_PATHS

        if not self._api_keys:
            logger.warning("Serving without authentication, no API keys configured")
        else:
            logger.info("API key authentication initialized", num_keys=len(self._api_keys))

    @property
    def allow_all(self) -> bool:
        """True when no keys are configured."""
        return not self._api_keys

    def is_path_excluded(self, path: str) -> bool:
        """
        Whether the path is served without a key.

        Matches exactly or as a path prefix ("/docs" covers "/docs/oauth2-redirect").
        """
        path = path.rstrip("/") or "/"
        return any(
            path == excluded or path.startswith(excluded + "/")
            for excluded in self._excluded_paths
        )

    def validate_api_key(self, api_key: Optional[str]) -> bool:
        if self.allow_all:
            return True
        return bool(api_key) and api_key in self._api_keys

    def authenticate(self, request: Request, api_key: Optional[str]) -> bool:
        """
        Let the request through or raise.

        Excluded paths pass without a key. Failures are logged with a hash
        of the presented key, never the key itself.

        Returns:
            True when the request may proceed

        Raises:
            HTTPException: 401 with AUTH_FAILED if the key is missing or unknown
        """
        path = request.url.path

        if self.is_path_excluded(path) or self.validate_api_key(api_key):
            return True

        logger.warning(
            "API key authentication failed",
            path=path,
            key_hash=hash_api_key(api_key) if api_key else "none",
            client_ip=request.client.host if request.client else "unknown",
        )
        raise _auth_failed("Invalid or missing API key")


# Replaced by configure_auth during startup
_auth_instance: Optional[APIKeyAuth] = None


def configure_auth(api_keys: Optional[List[str]] = None) -> APIKeyAuth:
    """Install the process-wide authenticator."""
    global _auth_instance
    _auth_instance = APIKeyAuth(api_keys=api_keys)
    return _auth_instance


def get_auth() -> APIKeyAuth:
    """Get the global auth instance, or an open one if none was configured."""
    if _auth_instance is None:
        return APIKeyAuth()
    return _auth_instance


async def get_api_key(
    request: Request,
    api_key: Optional[str] = Depends(api_key_header),  # noqa: B008
) -> Optional[str]:
    """Read X-API-Key and reject the request unless it may proceed."""
    get_auth().authenticate(request, api_key)
    return api_key


def require_api_key(
    api_key: Optional[str] = Depends(get_api_key),  # noqa: B008
) -> Optional[str]:
    """Route dependency for endpoints that need a client key."""
    if api_key is None and not get_auth().allow_all:
        raise _auth_failed("API key is required")
    return api_key
