"""Size-enforcing multipart parser on top of Starlette's."""

from typing import AsyncGenerator, Optional

from starlette.datastructures import Headers
from starlette.formparsers import MultiPartException, MultiPartParser

from legacy_web.multipart.config import MultipartConfig


class SizeLimitExceeded(MultiPartException):
    """Raised from inside the parser; Starlette closes open files on it."""

    def __init__(self, limit: int, scope: str):
        self.limit = limit
        self.scope = scope
        super().__init__(f"Maximum upload size exceeded: {scope} limit is {limit} bytes")


async def limit_stream(
    stream: AsyncGenerator[bytes, None], max_request_size: int
) -> AsyncGenerator[bytes, None]:
    """Pass body chunks through, failing once more than ``max_request_size`` arrived."""
    received = 0
    async for chunk in stream:
        received += len(chunk)
        if received > max_request_size:
            raise SizeLimitExceeded(max_request_size, "request")
        yield chunk


class LimitedMultiPartParser(MultiPartParser):
    """
    Multipart parser that applies a :class:`MultipartConfig`.

    File parts are written to the config's spool files (memory below the
    threshold, ``location`` at or above it) and counted against
    ``max_file_size`` as they stream in.
    """

    def __init__(
        self,
        headers: Headers,
        stream: AsyncGenerator[bytes, None],
        config: MultipartConfig,
        **kwargs,
    ):
        super().__init__(headers, limit_stream(stream, config.max_request_size), **kwargs)
        self.config = config
        self._current_file_size = 0

    def on_part_begin(self) -> None:
        super().on_part_begin()
        self._current_file_size = 0

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._current_part.file is not None:
            self._current_file_size += end - start
            if self._current_file_size > self.config.max_file_size:
                raise SizeLimitExceeded(self.config.max_file_size, "file")
        super().on_part_data(data, start, end)

    def on_headers_finished(self) -> None:
        super().on_headers_finished()
        upload = self._current_part.file
        if upload is None:
            return
        default_file: Optional[object] = upload.file
        if default_file in self._files_to_close_on_error:
            self._files_to_close_on_error.remove(default_file)
        upload.file.close()
        spool = self.config.create_spool_file()
        self._files_to_close_on_error.append(spool)
        upload.file = spool
