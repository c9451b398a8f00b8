"""File upload (multipart) limits."""

from typing import Final

MIB: Final[int] = 1024 * 1024


class Multipart:
    """Multipart policy applied to the front controller."""

    UPLOAD_DIR: Final[str] = "resources/upload"
    MAX_FILE_SIZE: Final[int] = 20 * MIB  # 20971520
    MAX_REQUEST_SIZE: Final[int] = 40 * MIB  # 41943040
    FILE_SIZE_THRESHOLD: Final[int] = 20 * MIB  # files at the threshold go to disk
