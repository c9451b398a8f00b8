"""Pooled data source backed by an asyncpg connection pool."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

import asyncpg
from loguru import logger

from legacy.config.properties import DatabaseProperties
from legacy.constants import Database
from legacy.core.exceptions import (
    DatabaseConnectionError,
    DatabaseNotConnectedError,
    DatabasePoolTimeoutError,
)


@dataclass(frozen=True)
class PoolPolicy:
    """Sizing and wait policy of the connection pool."""

    max_pool_size: int = Database.MAX_POOL_SIZE
    min_idle: int = Database.MIN_IDLE
    connection_timeout: float = Database.CONNECTION_TIMEOUT

    def __post_init__(self) -> None:
        if self.max_pool_size < 1:
            raise ValueError(f"max_pool_size must be >= 1, got: {self.max_pool_size}")
        if not 0 <= self.min_idle <= self.max_pool_size:
            raise ValueError(
                f"min_idle must be between 0 and {self.max_pool_size}, got: {self.min_idle}"
            )
        if self.connection_timeout <= 0:
            raise ValueError(f"connection_timeout must be > 0, got: {self.connection_timeout}")


class PooledDataSource:
    """
    Owns the process-wide connection pool.

    The pool itself is created by open(): asyncpg binds pools to the running
    event loop, so construction only records the configuration. open() warms
    ``min_idle`` connections and therefore fails fast on an unreachable
    database. acquire() blocks up to ``connection_timeout`` when every
    connection is checked out.
    """

    def __init__(self, properties: DatabaseProperties, policy: Optional[PoolPolicy] = None):
        """
        Initialize data source.

        Args:
            properties: Driver, URL and credentials
            policy: Pool sizing (defaults to 10 max / 5 idle / 30s)
        """
        self.properties = properties
        self.policy = policy or PoolPolicy()
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_lock = asyncio.Lock()

    @property
    def max_pool_size(self) -> int:
        return self.policy.max_pool_size

    @property
    def min_idle(self) -> int:
        return self.policy.min_idle

    @property
    def connection_timeout(self) -> float:
        return self.policy.connection_timeout

    @property
    def is_open(self) -> bool:
        return self.pool is not None

    async def open(self) -> None:
        """
        Create the pool and establish ``min_idle`` connections.

        Raises:
            DatabaseConnectionError: If the database cannot be reached
        """
        async with self._pool_lock:
            if self.pool is not None:
                return
            try:
                self.pool = await asyncpg.create_pool(
                    self.properties.dsn,
                    user=self.properties.username,
                    password=self.properties.password.get_secret_value(),
                    min_size=self.policy.min_idle,
                    max_size=self.policy.max_pool_size,
                    timeout=self.policy.connection_timeout,
                )
            except (
                OSError,
                asyncio.TimeoutError,
                asyncpg.PostgresError,
                asyncpg.InterfaceError,
            ) as e:
                raise DatabaseConnectionError(
                    f"Failed to open connection pool for {self.properties.masked_url}: {e}"
                ) from e

            logger.info(
                f"Database pool opened (min_idle={self.policy.min_idle}, "
                f"max={self.policy.max_pool_size}): {self.properties.masked_url}"
            )

    async def close(self) -> None:
        """Close database connection pool."""
        async with self._pool_lock:
            if self.pool is not None:
                await self.pool.close()
                self.pool = None
                logger.info("Database connection pool closed")

    @asynccontextmanager
    async def acquire(self, timeout: Optional[float] = None) -> AsyncIterator[asyncpg.Connection]:
        """
        Check a connection out of the pool.

        Args:
            timeout: Maximum wait, defaults to the pool's connection_timeout

        Yields:
            Database connection, returned to the pool on exit

        Raises:
            DatabaseNotConnectedError: If open() has not been called
            DatabasePoolTimeoutError: If no connection frees up within timeout
        """
        if self.pool is None:
            raise DatabaseNotConnectedError()

        wait = self.policy.connection_timeout if timeout is None else timeout
        try:
            conn = await self.pool.acquire(timeout=wait)
        except asyncio.TimeoutError:
            logger.error(
                f"Database connection pool exhausted "
                f"(timeout: {wait}s, pool_size: {self.policy.max_pool_size})"
            )
            raise DatabasePoolTimeoutError(timeout=wait, pool_size=self.policy.max_pool_size)

        try:
            yield conn
        finally:
            await self.pool.release(conn)

    async def health_check(self) -> bool:
        """
        Perform a health check on the database connection.

        Returns:
            True if database is healthy
        """
        try:
            async with self.acquire(timeout=5.0) as conn:
                result = await conn.fetchval("SELECT 1")
                return result is not None
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def get_pool_stats(self) -> Dict[str, Any]:
        """
        Get current connection pool statistics.

        Returns:
            Dictionary with max_pool_size, min_idle, pool_size (open
            connections), pool_free, pool_used and utilization (0.0 to 1.0)
        """
        stats: Dict[str, Any] = {
            "max_pool_size": self.policy.max_pool_size,
            "min_idle": self.policy.min_idle,
            "pool_size": 0,
            "pool_free": 0,
            "pool_used": 0,
            "utilization": 0.0,
        }
        if self.pool is None:
            return stats

        pool_total = self.pool.get_size()
        pool_idle = self.pool.get_idle_size()
        pool_used = pool_total - pool_idle
        stats.update(
            pool_size=pool_total,
            pool_free=pool_idle,
            pool_used=pool_used,
            utilization=round(pool_used / self.policy.max_pool_size, 2),
        )
        return stats
