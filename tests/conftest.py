"""Pytest configuration and common fixtures."""

import os
import sys
import warnings
from pathlib import Path
from typing import Any, List, Optional

# Set before any legacy import so settings and logging see the test environment
os.environ.setdefault("ENV", "testing")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from unittest.mock import AsyncMock, MagicMock

import pytest

from legacy.config.properties import DatabaseProperties, load_database_properties
from legacy.core.settings import AppSettings, reset_settings
from legacy.db.data_source import PooledDataSource

TEST_PROPERTIES = (
    "db.driver=postgresql\n"
    "db.url=postgresql://localhost:5432/legacy_test\n"
    "db.username=legacy\n"
    "db.password=s3cr3t-pw\n"
)

DB_ENV_VARS = ("DB_DRIVER", "DB_URL", "DB_USERNAME", "DB_PASSWORD")


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Isolate every test from the developer's environment."""
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.delenv("APP_ENV", raising=False)
    for var in DB_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def properties_file(tmp_path) -> Path:
    """A complete database.properties file."""
    path = tmp_path / "database.properties"
    path.write_text(TEST_PROPERTIES)
    return path


@pytest.fixture
def database_properties(properties_file) -> DatabaseProperties:
    return load_database_properties(properties_file)


@pytest.fixture
def app_settings(tmp_path, properties_file) -> AppSettings:
    """Settings pointing every directory into tmp_path."""
    static_dir = tmp_path / "resources"
    (static_dir / "css").mkdir(parents=True)
    (static_dir / "css" / "style.css").write_text("body { margin: 0; }")
    return AppSettings(
        database_properties=properties_file,
        upload_dir=static_dir / "upload",
        static_dir=static_dir,
        log_level="DEBUG",
    )


class FakeTransaction:
    """Stands in for asyncpg's Transaction context manager."""

    def __init__(self, connection: "FakeConnection"):
        self.connection = connection

    async def __aenter__(self) -> "FakeTransaction":
        self.connection.events.append("begin")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.connection.events.append("rollback" if exc_type else "commit")
        return False


class FakeConnection:
    """asyncpg connection double recording transaction events."""

    def __init__(self):
        self.events: List[str] = []
        self.fetchval = AsyncMock(return_value=1)
        self.fetchrow = AsyncMock(return_value=None)
        self.fetch = AsyncMock(return_value=[])
        self.execute = AsyncMock(return_value="UPDATE 1")

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)


def make_fake_pool(connection: Optional[FakeConnection] = None) -> Any:
    """asyncpg pool double handing out one connection."""
    pool = MagicMock()
    pool.connection = connection or FakeConnection()
    pool.acquire = AsyncMock(return_value=pool.connection)
    pool.release = AsyncMock()
    pool.close = AsyncMock()
    pool.get_size = MagicMock(return_value=5)
    pool.get_idle_size = MagicMock(return_value=4)
    return pool


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def open_data_source(database_properties, fake_connection) -> PooledDataSource:
    """Data source whose pool is a test double."""
    data_source = PooledDataSource(database_properties)
    data_source.pool = make_fake_pool(fake_connection)
    return data_source
