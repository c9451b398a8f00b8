"""Database and connection pool constants."""

from typing import Final, Tuple


class Database:
    """Connection pool policy.

    NOTE: Credentials and the URL are never defaults; they come from the
    properties store (see legacy/config/properties.py).
    """

    MAX_POOL_SIZE: Final[int] = 10
    MIN_IDLE: Final[int] = 5
    CONNECTION_TIMEOUT: Final[float] = 30.0
    SUPPORTED_DRIVERS: Final[Tuple[str, ...]] = ("postgresql", "postgres")
    MAPPER_PACKAGES: Final[Tuple[str, ...]] = ("legacy.*.repository.mapper",)


class Properties:
    """Keys of the external properties store."""

    FILE_NAME: Final[str] = "database.properties"
    DRIVER: Final[str] = "db.driver"
    URL: Final[str] = "db.url"
    USERNAME: Final[str] = "db.username"
    PASSWORD: Final[str] = "db.password"
    REQUIRED: Final[Tuple[str, ...]] = (DRIVER, URL, USERNAME, PASSWORD)
