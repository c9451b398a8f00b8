"""Request correlation ID interceptor for tracking requests across logs."""

import re
import uuid
from typing import Callable

from fastapi import Request, Response

from legacy.core.logger import correlation_id_ctx

# Client-supplied IDs are echoed into headers and logs
_VALID_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class CorrelationInterceptor:
    """
    Interceptor adding a correlation ID to requests and responses.

    The correlation ID is:
    1. Read from X-Request-ID header if present and well-formed
    2. Generated as UUID4 otherwise
    3. Stored in a context variable so every log record carries it
    4. Added to response headers
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        req_id = request.headers.get(self.HEADER_NAME, "")
        if not _VALID_ID.match(req_id):
            req_id = str(uuid.uuid4())

        request.state.correlation_id = req_id
        token = correlation_id_ctx.set(req_id)
        try:
            response = await call_next(request)
            response.headers[self.HEADER_NAME] = req_id
            return response
        finally:
            correlation_id_ctx.reset(token)
