"""RFC 7807 Problem Details bodies."""

from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from legacy.core.exceptions import LegacyAppError

PROBLEM_MEDIA_TYPE = "application/problem+json"

_ERROR_TYPES = {
    400: "urn:legacy:error:bad-request",
    401: "urn:legacy:error:unauthorized",
    403: "urn:legacy:error:forbidden",
    404: "urn:legacy:error:not-found",
    405: "urn:legacy:error:method-not-allowed",
    409: "urn:legacy:error:conflict",
    413: "urn:legacy:error:payload-too-large",
    422: "urn:legacy:error:validation",
    500: "urn:legacy:error:internal-server",
    503: "urn:legacy:error:service-unavailable",
}

_ERROR_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Validation Error",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def error_type(status_code: int) -> str:
    return _ERROR_TYPES.get(status_code, f"urn:legacy:error:http-{status_code}")


def error_title(status_code: int) -> str:
    return _ERROR_TITLES.get(status_code, "Error")


def problem_response(request: Request, error: LegacyAppError) -> JSONResponse:
    """
    Render an application error as Problem Details.

    Internal errors (500) do not echo their message to the client.
    """
    status_code = error.http_status
    content: Dict[str, Any] = {
        "type": error.error_type_uri,
        "title": error.title,
        "status": status_code,
        "detail": error.message if status_code != 500 else "An internal error occurred",
        "instance": request.url.path,
    }
    if error.details and status_code != 500:
        content["details"] = error.details
    headers = {"Retry-After": "30"} if error.recoverable else None
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
        media_type=PROBLEM_MEDIA_TYPE,
    )
