"""Health check routes."""

from typing import Any, Dict

from fastapi import APIRouter, Response

from legacy.health.service import HealthService
from legacy_web.multipart.resolver import MultipartRoute


class HealthController:
    """Liveness and readiness probes."""

    def __init__(self, health_service: HealthService):
        self.health_service = health_service

    def create_router(self) -> APIRouter:
        router = APIRouter(tags=["health"], route_class=MultipartRoute)
        router.add_api_route("/health", self.liveness, methods=["GET"])
        router.add_api_route("/health/ready", self.readiness, methods=["GET"])
        return router

    async def liveness(self) -> Dict[str, Any]:
        """
        Liveness probe - always 200 while the process serves requests.

        Returns:
            Liveness status
        """
        return self.health_service.liveness()

    async def readiness(self, response: Response) -> Dict[str, Any]:
        """
        Readiness probe - 503 until the database answers.

        Returns:
            Readiness status with database check
        """
        result = await self.health_service.readiness()
        if result["status"] != "ready":
            response.status_code = 503
        return result
