"""Data access: pooled data source, SQL sessions and transactions."""

from .data_source import PooledDataSource, PoolPolicy
from .session import MapperConfiguration, RowMapper, SqlSession, SqlSessionFactory
from .transaction import TransactionManager, current_connection

__all__ = [
    "PooledDataSource",
    "PoolPolicy",
    "MapperConfiguration",
    "RowMapper",
    "SqlSession",
    "SqlSessionFactory",
    "TransactionManager",
    "current_connection",
]
