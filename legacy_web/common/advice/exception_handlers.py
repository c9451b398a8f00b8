"""RFC 7807 Problem Details exception handlers for the front controller."""

from typing import Any, Callable, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException

from legacy.core.exceptions import LegacyAppError
from legacy_web.common.advice.problem import (
    PROBLEM_MEDIA_TYPE,
    error_title,
    error_type,
    problem_response,
)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Convert HTTPException to RFC 7807 Problem Details format."""
    status_code = exc.status_code

    content = {
        "type": error_type(status_code),
        "title": error_title(status_code),
        "status": status_code,
        "detail": exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        "instance": request.url.path,
    }

    headers = getattr(exc, "headers", None) or {}

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert Pydantic validation errors to RFC 7807 format."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors[field] = error["msg"]

    return JSONResponse(
        status_code=422,
        content={
            "type": error_type(422),
            "title": error_title(422),
            "status": 422,
            "detail": "Request validation failed",
            "instance": request.url.path,
            "errors": errors,
        },
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def application_exception_handler(request: Request, exc: LegacyAppError) -> JSONResponse:
    """Convert application errors using their own status and problem type."""
    if exc.http_status >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return problem_response(request, exc)


class ProblemDetailsAdvice:
    """Controller advice mapping exceptions to Problem Details responses."""

    def exception_handlers(self) -> Dict[Any, Callable[..., Any]]:
        return {
            HTTPException: http_exception_handler,
            RequestValidationError: validation_exception_handler,
            LegacyAppError: application_exception_handler,
        }

    def install(self, app: FastAPI) -> None:
        for exc_class, handler in self.exception_handlers().items():
            app.add_exception_handler(exc_class, handler)
