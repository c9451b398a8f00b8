"""Data-access configuration: pool, session factory and transaction manager."""

from typing import Optional

from legacy.config.properties import DatabaseProperties
from legacy.context.application_context import ApplicationContext
from legacy.db.data_source import PooledDataSource, PoolPolicy
from legacy.db.session import MapperConfiguration, SqlSessionFactory
from legacy.db.transaction import TransactionManager


class DataAccessConfiguration:
    """
    Produces the three process-wide data-access singletons.

    Each factory method is memoized, so the session factory and the
    transaction manager always share the one pooled data source.
    """

    def __init__(self, properties: DatabaseProperties, policy: Optional[PoolPolicy] = None):
        self.properties = properties
        self.policy = policy or PoolPolicy()
        self.mapper_configuration = MapperConfiguration(
            map_underscore_to_camel_case=True, call_setters_on_nulls=True
        )
        self._data_source: Optional[PooledDataSource] = None
        self._session_factory: Optional[SqlSessionFactory] = None
        self._transaction_manager: Optional[TransactionManager] = None

    def data_source(self) -> PooledDataSource:
        if self._data_source is None:
            self._data_source = PooledDataSource(self.properties, self.policy)
        return self._data_source

    def sql_session_factory(self) -> SqlSessionFactory:
        if self._session_factory is None:
            self._session_factory = SqlSessionFactory(
                self.data_source(), self.mapper_configuration
            )
        return self._session_factory

    def transaction_manager(self) -> TransactionManager:
        if self._transaction_manager is None:
            self._transaction_manager = TransactionManager(self.data_source())
        return self._transaction_manager

    def register_beans(self, context: ApplicationContext) -> None:
        """Register the three singletons; the pool is closed with the context."""
        context.register_bean(
            PooledDataSource, self.data_source, on_close=lambda ds: ds.close()
        )
        context.register_bean(SqlSessionFactory, self.sql_session_factory)
        context.register_bean(TransactionManager, self.transaction_manager)
