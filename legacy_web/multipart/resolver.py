"""Multipart resolver and the request/route classes that use it."""

from typing import Any, Callable, Coroutine, Union

from fastapi import Request, Response
from fastapi.routing import APIRoute
from loguru import logger
from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException
from python_multipart.multipart import parse_options_header

from legacy.core.exceptions import MaxUploadSizeExceededError, MultipartParseError
from legacy_web.multipart.config import MultipartConfig
from legacy_web.multipart.parser import LimitedMultiPartParser, SizeLimitExceeded

MULTIPART_CONTENT_TYPE = b"multipart/form-data"


def is_multipart(request: Request) -> bool:
    content_type, _ = parse_options_header(request.headers.get("Content-Type"))
    return content_type == MULTIPART_CONTENT_TYPE


def is_on_disk(upload: UploadFile) -> bool:
    """Whether an uploaded file has been written to the upload directory."""
    return bool(getattr(upload.file, "_rolled", True))


class MultipartResolver:
    """Parses multipart bodies according to a :class:`MultipartConfig`."""

    def __init__(self, config: MultipartConfig):
        self.config = config

    async def resolve(
        self,
        request: Request,
        max_files: Union[int, float] = 1000,
        max_fields: Union[int, float] = 1000,
        max_part_size: int = 1024 * 1024,
    ) -> FormData:
        """
        Parse the request body.

        Args:
            request: Request with a multipart/form-data body
            max_files: Maximum number of file parts
            max_fields: Maximum number of plain fields
            max_part_size: Maximum size of a plain (non-file) field

        Returns:
            Parsed form; files are open and must be closed by the caller

        Raises:
            MaxUploadSizeExceededError: If a file or the body exceeds its limit
            MultipartParseError: If the body is malformed
        """
        parser = LimitedMultiPartParser(
            request.headers,
            request.stream(),
            self.config,
            max_files=max_files,
            max_fields=max_fields,
            max_part_size=max_part_size,
        )
        try:
            return await parser.parse()
        except SizeLimitExceeded as e:
            logger.warning(
                f"Upload rejected on {request.url.path}: {e.scope} exceeds {e.limit} bytes"
            )
            raise MaxUploadSizeExceededError(e.limit, scope=e.scope) from e
        except MultiPartException as e:
            raise MultipartParseError(e.message) from e


class MultipartRequest(Request):
    """Request whose form parsing goes through the application's multipart resolver."""

    async def _get_form(
        self,
        *,
        max_files: Union[int, float] = 1000,
        max_fields: Union[int, float] = 1000,
        max_part_size: int = 1024 * 1024,
    ) -> FormData:
        resolver = getattr(self.app.state, "multipart_resolver", None)
        if self._form is None and resolver is not None and is_multipart(self):
            self._form = await resolver.resolve(
                self, max_files=max_files, max_fields=max_fields, max_part_size=max_part_size
            )
        return await super()._get_form(
            max_files=max_files, max_fields=max_fields, max_part_size=max_part_size
        )


class MultipartRoute(APIRoute):
    """
    Route that resolves multipart bodies before the endpoint is called.

    The body is parsed ahead of FastAPI's own form handling so that size and
    parse errors reach the exception handlers as they are, instead of being
    folded into a generic 400.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()

        async def multipart_route_handler(request: Request) -> Response:
            request = MultipartRequest(request.scope, request.receive)
            if not is_multipart(request):
                return await original_route_handler(request)
            try:
                await request.form()
                return await original_route_handler(request)
            finally:
                await request.close()

        return multipart_route_handler
