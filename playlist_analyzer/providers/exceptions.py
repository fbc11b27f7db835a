"""Provider-specific exceptions."""

from typing import Optional


class ProviderError(Exception):
    """Base exception for provider errors."""

    pass


class InvalidPlaylistURLError(ProviderError):
    """Raised when a URL does not name a playlist."""

    pass


class PlaylistNotFoundError(ProviderError):
    """Raised when the playlist is private, deleted or does not exist."""

    pass


class UpstreamError(ProviderError):
    """Raised when an upstream API call does not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class FetchCancelledError(ProviderError):
    """Raised when a fetch is cancelled through its cancellation token."""

    pass
