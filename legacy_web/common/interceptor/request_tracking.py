"""Request tracking interceptor."""

import time
from typing import Callable

from fastapi import Request, Response
from loguru import logger


class RequestTrackingInterceptor:
    """Log start, completion and duration of every request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        logger.info(f"Request started: {request.method} {request.url.path}")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"-> {response.status_code} ({duration_ms:.1f}ms)"
        )
        return response
