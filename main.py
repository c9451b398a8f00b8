#!/usr/bin/env python3
"""
Legacy web application.

Main entry point: serves the front controller with uvicorn.
"""

import argparse
import os
import sys

import uvicorn
from loguru import logger
from pydantic import ValidationError

from legacy.core.exceptions import ConfigurationError
from legacy.core.settings import get_settings


def parse_safe_port(env_var: str = "UVICORN_PORT", default: int = 8000) -> int:
    """Parse port from environment variable with validation.

    Args:
        env_var: Environment variable name to read
        default: Default port if env var is missing or invalid

    Returns:
        Valid port number (1-65535)
    """
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        port = int(raw)
        if not (1 <= port <= 65535):
            raise ValueError(f"Port must be 1-65535, got: {port}")
        return port
    except ValueError as e:
        logger.warning(f"Invalid {env_var}: {e}. Using default {default}")
        return default


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Legacy web application")
    # Security: Default to localhost only. Set UVICORN_HOST=0.0.0.0 to bind to all interfaces.
    parser.add_argument("--host", default=os.getenv("UVICORN_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=parse_safe_port())
    args = parser.parse_args()

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Invalid application settings: {e}")
        sys.exit(1)

    try:
        uvicorn.run(
            "legacy_web.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            log_level=settings.log_level.lower(),
        )
    except ConfigurationError as e:
        logger.error(f"Fatal configuration error: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
