"""Multipart limits and upload spooling."""

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from legacy.constants import Multipart


@dataclass(frozen=True)
class MultipartConfig:
    """
    Upload policy of the front controller.

    Attributes:
        location: Directory where file parts are written once spilled to disk
        max_file_size: Largest accepted file part, in bytes
        max_request_size: Largest accepted multipart body, in bytes
        file_size_threshold: A file part this large or larger is kept on disk
    """

    location: Path
    max_file_size: int = Multipart.MAX_FILE_SIZE
    max_request_size: int = Multipart.MAX_REQUEST_SIZE
    file_size_threshold: int = Multipart.FILE_SIZE_THRESHOLD

    def __post_init__(self) -> None:
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be > 0, got: {self.max_file_size}")
        if self.max_request_size <= 0:
            raise ValueError(f"max_request_size must be > 0, got: {self.max_request_size}")
        if self.file_size_threshold < 0:
            raise ValueError(
                f"file_size_threshold must be >= 0, got: {self.file_size_threshold}"
            )

    def create_spool_file(self) -> IO[bytes]:
        """
        Temporary file for one file part.

        SpooledTemporaryFile rolls over once its content is strictly larger
        than ``max_size``, so the limit is set one byte below the threshold.
        """
        if self.file_size_threshold <= 1:
            return tempfile.TemporaryFile(dir=self.location)
        return tempfile.SpooledTemporaryFile(
            max_size=self.file_size_threshold - 1, dir=self.location
        )
