"""Early rejection of oversized multipart requests."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from legacy.core.exceptions import MaxUploadSizeExceededError
from legacy_web.common.advice.problem import problem_response
from legacy_web.multipart.resolver import is_multipart


class MultipartSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject multipart requests whose declared Content-Length is over the limit.

    Chunked bodies without a Content-Length are left to the multipart
    resolver, which enforces the same limit while parsing.
    """

    def __init__(self, app: ASGIApp, max_request_size: int):
        super().__init__(app)
        self.max_request_size = max_request_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and is_multipart(request):
            if int(content_length) > self.max_request_size:
                error = MaxUploadSizeExceededError(self.max_request_size, scope="request")
                return problem_response(request, error)
        return await call_next(request)
