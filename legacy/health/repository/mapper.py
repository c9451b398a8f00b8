"""SQL for database health probes."""

import time
from typing import Any, Dict

from legacy.db.session import SqlSessionFactory


class HealthMapper:
    """Round-trips a trivial statement through a pooled session."""

    PING_SQL = "SELECT 1"

    def __init__(self, session_factory: SqlSessionFactory):
        self.session_factory = session_factory

    async def ping(self) -> Dict[str, Any]:
        """
        Run ``SELECT 1``.

        Returns:
            ``{"ok": bool, "latency_ms": float}``
        """
        start_time = time.perf_counter()
        async with self.session_factory.open_session() as session:
            result = await session.select_value(self.PING_SQL)
        latency_ms = (time.perf_counter() - start_time) * 1000
        return {"ok": result == 1, "latency_ms": round(latency_ms, 2)}
