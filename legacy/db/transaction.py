"""Transaction manager over the pooled data source."""

from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, Optional, Tuple

import asyncpg
from loguru import logger

from legacy.db.data_source import PooledDataSource

# (data source, connection) bound by the innermost active transaction of this task
_bound_connection: ContextVar[Optional[Tuple[PooledDataSource, asyncpg.Connection]]] = (
    ContextVar("bound_connection", default=None)
)


def current_connection(data_source: PooledDataSource) -> Optional[asyncpg.Connection]:
    """
    Connection of the active transaction on ``data_source``, if any.

    Sessions opened inside ``TransactionManager.transaction()`` use it so
    their statements commit or roll back together.
    """
    bound = _bound_connection.get()
    if bound is not None and bound[0] is data_source:
        return bound[1]
    return None


class TransactionManager:
    """Demarcates transactions on the same pool the session factory uses."""

    def __init__(self, data_source: PooledDataSource):
        self.data_source = data_source

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Run the block in a database transaction.

        Commits when the block completes, rolls back when it raises; the
        exception always propagates. A nested call joins the outer
        transaction.

        Yields:
            The transaction's connection

        Raises:
            DatabaseNotConnectedError: If the pool is not open
            DatabasePoolTimeoutError: If no connection frees up in time
        """
        joined = current_connection(self.data_source)
        if joined is not None:
            yield joined
            return

        async with self.data_source.acquire() as conn:
            token = _bound_connection.set((self.data_source, conn))
            try:
                async with conn.transaction():
                    yield conn
            except BaseException:
                logger.debug("Transaction rolled back")
                raise
            finally:
                _bound_connection.reset(token)
