"""SQL sessions with typed row mapping.

Statements are written out explicitly by mapper classes; this module only
runs them and turns rows into dictionaries or dataclass instances::

    async with factory.open_session() as session:
        user = await session.select_one(
            "SELECT user_id, display_name FROM users WHERE user_id = $1", 7, result_type=User
        )
"""

import dataclasses
from contextlib import asynccontextmanager
from typing import (
    Any,
    AsyncIterator,
    Dict,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

import asyncpg
from loguru import logger

from legacy.common.util import normalize_property_name, to_camel_case
from legacy.db.data_source import PooledDataSource
from legacy.db.transaction import current_connection

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class MapperConfiguration:
    """Row mapping switches."""

    map_underscore_to_camel_case: bool = True
    call_setters_on_nulls: bool = True


class RowMapper:
    """Maps result rows to dictionaries or dataclass instances."""

    def __init__(self, configuration: Optional[MapperConfiguration] = None):
        self.configuration = configuration or MapperConfiguration()
        self._field_cache: Dict[type, Dict[str, str]] = {}

    def map_row(
        self, row: Mapping[str, Any], result_type: Optional[Type[T]] = None
    ) -> Union[Dict[str, Any], T]:
        """
        Map one row.

        Args:
            row: Column name to value (an asyncpg Record or a dict)
            result_type: Dataclass to build, or None for a dict

        Returns:
            A dict keyed by (camelCase) column name, or a ``result_type`` instance

        Raises:
            TypeError: If result_type is not a dataclass
        """
        if result_type is None:
            return self._to_dict(row)
        return self._to_dataclass(row, result_type)

    def _to_dict(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for column, value in row.items():
            if value is None and not self.configuration.call_setters_on_nulls:
                continue
            key = to_camel_case(column) if self.configuration.map_underscore_to_camel_case else column
            result[key] = value
        return result

    def _fields_of(self, result_type: type) -> Dict[str, str]:
        fields = self._field_cache.get(result_type)
        if fields is None:
            if not dataclasses.is_dataclass(result_type):
                raise TypeError(f"{result_type.__name__} is not a dataclass")
            fields = {
                normalize_property_name(field.name): field.name
                for field in dataclasses.fields(result_type)
                if field.init
            }
            self._field_cache[result_type] = fields
        return fields

    def _to_dataclass(self, row: Mapping[str, Any], result_type: Type[T]) -> T:
        fields = self._fields_of(result_type)
        kwargs: Dict[str, Any] = {}
        for column, value in row.items():
            name = fields.get(normalize_property_name(column))
            if name is None:
                continue
            if value is None and not self.configuration.call_setters_on_nulls:
                continue
            kwargs[name] = value
        return result_type(**kwargs)


class SqlSession:
    """Runs statements on one connection and maps the results."""

    def __init__(self, connection: asyncpg.Connection, row_mapper: RowMapper):
        self.connection = connection
        self.row_mapper = row_mapper

    async def select_one(
        self, sql: str, *args: Any, result_type: Optional[Type[T]] = None
    ) -> Optional[Union[Dict[str, Any], T]]:
        """
        Fetch a single row.

        Returns:
            The mapped row, or None when the query returns nothing
        """
        row = await self.connection.fetchrow(sql, *args)
        if row is None:
            return None
        return self.row_mapper.map_row(row, result_type)

    async def select_list(
        self, sql: str, *args: Any, result_type: Optional[Type[T]] = None
    ) -> List[Union[Dict[str, Any], T]]:
        rows = await self.connection.fetch(sql, *args)
        return [self.row_mapper.map_row(row, result_type) for row in rows]

    async def select_value(self, sql: str, *args: Any) -> Any:
        return await self.connection.fetchval(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement that returns no rows.

        Returns:
            The command status tag, e.g. ``"UPDATE 1"``
        """
        return await self.connection.execute(sql, *args)


class SqlSessionFactory:
    """Opens sessions on the shared pooled data source."""

    def __init__(
        self,
        data_source: PooledDataSource,
        configuration: Optional[MapperConfiguration] = None,
    ):
        self.data_source = data_source
        self.configuration = configuration or MapperConfiguration()
        self.row_mapper = RowMapper(self.configuration)

    @asynccontextmanager
    async def open_session(self) -> AsyncIterator[SqlSession]:
        """
        Open a session.

        Inside an active transaction on the same data source the session
        shares the transaction's connection; otherwise it checks out its own
        connection and every statement commits on its own.

        Raises:
            DatabaseNotConnectedError: If the pool is not open
            DatabasePoolTimeoutError: If no connection frees up in time
        """
        conn = current_connection(self.data_source)
        if conn is not None:
            yield SqlSession(conn, self.row_mapper)
            return

        async with self.data_source.acquire() as conn:
            logger.debug("Session opened on a pooled connection")
            yield SqlSession(conn, self.row_mapper)
