"""Liveness and readiness of the application tier."""

from datetime import datetime, timezone
from typing import Any, Dict

import asyncpg
from loguru import logger

from legacy import __version__
from legacy.common.aop import transactional
from legacy.core.exceptions import DatabaseError
from legacy.db.data_source import PooledDataSource
from legacy.health.repository.mapper import HealthMapper


class HealthService:
    """Reports whether the process is up and whether the database answers."""

    def __init__(self, health_mapper: HealthMapper, data_source: PooledDataSource):
        self.health_mapper = health_mapper
        self.data_source = data_source

    def liveness(self) -> Dict[str, Any]:
        return {
            "status": "alive",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @transactional
    async def check_database(self) -> Dict[str, Any]:
        """
        Check database connectivity with latency measurement.

        Returns:
            Status, latency and pool statistics
        """
        ping = await self.health_mapper.ping()
        pool_stats = self.data_source.get_pool_stats()
        return {
            "status": "healthy" if ping["ok"] else "unhealthy",
            "latency_ms": ping["latency_ms"],
            "pool": {
                "size": pool_stats["pool_size"],
                "idle": pool_stats["pool_free"],
                "used": pool_stats["pool_used"],
                "utilization": pool_stats["utilization"],
            },
        }

    async def readiness(self) -> Dict[str, Any]:
        """
        Readiness of the service: ready only when the database answers.

        Returns:
            ``{"status": "ready" | "not_ready", "timestamp", "checks"}``
        """
        try:
            database = await self.check_database()
        except (DatabaseError, asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            database = {"status": "unhealthy", "error": str(e), "latency_ms": 0}

        ready = database["status"] == "healthy"
        return {
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {"database": database},
        }
