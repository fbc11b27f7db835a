"""Input validation utilities for the API layer.

Playlist URLs are validated against a domain whitelist before the
playlist identifier is extracted from their ``list=`` query parameter.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional, Set
from urllib.parse import ParseResult, urlparse

import structlog

from playlist_analyzer.providers.exceptions import InvalidPlaylistURLError

logger = structlog.get_logger(__name__)

# Playlist identifiers are URL-safe base64-ish strings
PLAYLIST_ID_PATTERN = re.compile(r"^[\w-]{2,64}$")

LIST_PARAM_PATTERN = re.compile(r"[?&]list=([^&#]*)")

MISSING_LIST_MESSAGE = (
    "Invalid YouTube playlist URL. Please make sure the URL contains a playlist ID."
)
INVALID_ID_MESSAGE = "Playlist ID contains invalid characters"


@dataclass(frozen=True)
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    error_message: Optional[str] = None
    sanitized_value: Optional[str] = None


class PlaylistURLValidator:
    """Validates playlist URLs and extracts their playlist identifier."""

    DEFAULT_ALLOWED_DOMAINS: FrozenSet[str] = frozenset(
        {
            "youtube.com",
            "www.youtube.com",
            "m.youtube.com",
            "music.youtube.com",
            "youtu.be",
        }
    )

    # Rejected with a warning, whatever the host
    DANGEROUS_SCHEMES: FrozenSet[str] = frozenset(
        {
            "javascript",
            "data",
            "file",
            "vbscript",
            "about",
        }
    )

    def __init__(self, allowed_domains: Optional[Set[str]] = None):
        self.allowed_domains = allowed_domains or self.DEFAULT_ALLOWED_DOMAINS

    def validate(self, url: str) -> ValidationResult:
        """Validate a playlist URL.

        The scheme must be http(s) or absent, the host must be whitelisted,
        and the ``list=`` parameter must carry a well-formed identifier.

        Args:
            url: URL to validate

        Returns:
            ValidationResult whose sanitized_value is the playlist identifier
        """
        if not isinstance(url, str) or not url.strip():
            return _reject("URL is required")
        url = url.strip()

        try:
            parsed = urlparse(url)
        except ValueError as e:
            logger.warning("URL parsing failed", url=url, error=str(e))
            return _reject("Invalid URL format")

        error = self._check_scheme(parsed.scheme.lower()) or self._check_host(parsed)
        if error:
            logger.debug("Playlist URL rejected", url=url, reason=error)
            return _reject(error)

        match = LIST_PARAM_PATTERN.search(url)
        if not match or not match.group(1):
            return _reject(MISSING_LIST_MESSAGE)

        playlist_id = match.group(1)
        if not PLAYLIST_ID_PATTERN.match(playlist_id):
            return _reject(INVALID_ID_MESSAGE)

        logger.debug("Playlist URL validated", url=url, playlist_id=playlist_id)
        return ValidationResult(is_valid=True, sanitized_value=playlist_id)

    def is_valid(self, url: str) -> bool:
        return self.validate(url).is_valid

    def _check_scheme(self, scheme: str) -> Optional[str]:
        if scheme in self.DANGEROUS_SCHEMES:
            logger.warning("Dangerous URL scheme detected", scheme=scheme)
            return f"URL scheme '{scheme}' is not allowed"
        if scheme not in ("http", "https", ""):
            return f"URL scheme '{scheme}' is not allowed"
        return None

    def _check_host(self, parsed: ParseResult) -> Optional[str]:
        host = parsed.netloc.lower()
        if not host:
            # "youtube.com/playlist?list=..." parses with the host in the path
            head = parsed.path.split("/", 1)[0].lower()
            host = head if "." in head else ""
        if not host:
            return "URL must include a valid domain"

        domain = host.split(":", 1)[0]
        if domain not in self.allowed_domains:
            return f"Domain '{domain}' is not in the allowed list"
        return None


def _reject(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error_message=message)


def validate_playlist_id(playlist_id: str) -> ValidationResult:
    """
    Validate a bare playlist identifier.

    Args:
        playlist_id: Identifier supplied directly by the client

    Returns:
        ValidationResult with the stripped identifier
    """
    if not isinstance(playlist_id, str) or not playlist_id.strip():
        return _reject("Playlist ID is required")

    playlist_id = playlist_id.strip()
    if not PLAYLIST_ID_PATTERN.match(playlist_id):
        return _reject(INVALID_ID_MESSAGE)
    return ValidationResult(is_valid=True, sanitized_value=playlist_id)


# Shared instance with the default whitelist
playlist_url_validator = PlaylistURLValidator()


def extract_playlist_id(url: str) -> str:
    """
    Extract the playlist identifier from a playlist URL.

    Args:
        url: URL containing a ``list=`` query parameter

    Returns:
        The playlist identifier

    Raises:
        InvalidPlaylistURLError: If the URL is not a valid playlist URL
    """
    result = playlist_url_validator.validate(url)
    if not result.is_valid or result.sanitized_value is None:
        raise InvalidPlaylistURLError(result.error_message or "Invalid playlist URL")
    return result.sanitized_value
