"""Request ID middleware.

Binds a request ID to the logging context for the duration of each
request and echoes it back in the X-Request-ID response header.
"""

import re

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from playlist_analyzer.core.logging import clear_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Client supplied IDs are only reused when they look like an opaque token
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID to every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        if incoming and _VALID_REQUEST_ID.match(incoming):
            request_id = set_request_id(incoming)
        else:
            request_id = set_request_id()

        try:
            response = await call_next(request)
        finally:
            clear_request_id()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
