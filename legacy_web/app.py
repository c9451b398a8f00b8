"""Application factory for ASGI servers.

    uvicorn legacy_web.app:create_app --factory
"""

from typing import Optional

from fastapi import FastAPI

from legacy.core.logger import setup_structured_logging
from legacy.core.settings import AppSettings, get_settings
from legacy_web.initializer import WebAppInitializer


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """
    Configure logging and build the application.

    Args:
        settings: Application settings, defaults to the process settings

    Returns:
        FastAPI application

    Raises:
        ConfigurationError: On any startup configuration failure
    """
    settings = settings or get_settings()
    setup_structured_logging(
        settings.log_level,
        json_format=settings.json_logs,
        diagnose=settings.is_development(),
    )
    return WebAppInitializer(settings).create_app()
