"""Static resource handlers."""

from pathlib import Path
from typing import List, Optional, Union

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from loguru import logger


class ResourceHandler:
    def __init__(self, url_pattern: str):
        self.url_pattern = url_pattern
        self.locations: List[Path] = []

    def add_resource_locations(self, *locations: Union[str, Path]) -> "ResourceHandler":
        self.locations.extend(Path(location) for location in locations)
        return self

    @property
    def mount_path(self) -> str:
        """``/resources/**`` is served as the ``/resources`` mount."""
        path = self.url_pattern
        for suffix in ("/**", "/*"):
            if path.endswith(suffix):
                path = path[: -len(suffix)]
        return path or "/"


class ResourceHandlerRegistry:
    """Maps URL patterns to directories served without a controller."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir
        self.handlers: List[ResourceHandler] = []

    def add_resource_handler(self, url_pattern: str) -> ResourceHandler:
        handler = ResourceHandler(url_pattern)
        self.handlers.append(handler)
        return handler

    def _absolute(self, location: Path) -> Path:
        if location.is_absolute() or self.base_dir is None:
            return location
        return self.base_dir / location

    def apply(self, app: FastAPI) -> None:
        """
        Mount every handler.

        A handler serves its first location; the directory may be created
        after startup.
        """
        for handler in self.handlers:
            if not handler.locations:
                raise ValueError(f"Resource handler '{handler.url_pattern}' has no location")
            directory = self._absolute(handler.locations[0])
            if len(handler.locations) > 1:
                logger.warning(
                    f"Resource handler '{handler.url_pattern}' serves only {directory}"
                )
            app.mount(
                handler.mount_path,
                StaticFiles(directory=str(directory), check_dir=False),
                name=handler.mount_path.strip("/") or "resources",
            )
            logger.debug(f"Static resources '{handler.url_pattern}' -> {directory}")
