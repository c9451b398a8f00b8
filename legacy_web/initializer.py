"""Application entry point: context hierarchy and front-controller registration."""

import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional, Sequence, Tuple, Type, Union

from fastapi import FastAPI
from loguru import logger

from legacy.config.root_config import RootConfig
from legacy.context import ApplicationContext
from legacy.core.exceptions import ConfigurationError, UploadDirectoryError
from legacy.core.settings import AppSettings, get_settings
from legacy.db.data_source import PooledDataSource
from legacy_web.config.app_config import build_dispatcher
from legacy_web.config.web_config import WebConfig
from legacy_web.multipart.config import MultipartConfig

DISPATCHER_NAME = "dispatcher"


@dataclass
class ServletRegistration:
    """Registration of the front controller on the outer application."""

    name: str
    mappings: Tuple[str, ...]
    load_on_startup: int = 1
    multipart_config: Optional[MultipartConfig] = None


def ensure_upload_directory(path: Union[str, Path]) -> Path:
    """
    Create the upload directory if it does not exist.

    Safe to call on every start. Any failure is fatal.

    Args:
        path: Upload directory (relative paths resolve against the working directory)

    Returns:
        Absolute path of the directory

    Raises:
        UploadDirectoryError: If the directory cannot be created or written to
    """
    path = Path(path).resolve()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise UploadDirectoryError(str(path), e.strerror or str(e)) from e
    if not os.access(path, os.W_OK):
        raise UploadDirectoryError(str(path), "directory is not writable")
    logger.info(f"Upload directory ready: {path}")
    return path


def _mount_path(mapping: str) -> str:
    path = mapping.rstrip("*").rstrip("/")
    return path or "/"


class WebAppInitializer:
    """
    Builds the application from the root and front-controller configurations.

    Startup sequence: upload directory, root context, web context (child of
    the root), front controller. Every step fails fast and none is retried.
    The connection pool opens when the application starts serving.
    """

    def __init__(self, settings: Optional[AppSettings] = None, strict_view_controllers: bool = False):
        """
        Initialize the initializer.

        Args:
            settings: Application settings, defaults to the process settings
            strict_view_controllers: Fail on a view controller/handler path conflict
        """
        self.settings = settings or get_settings()
        self.strict_view_controllers = strict_view_controllers

    def root_config_classes(self) -> Sequence[Type[RootConfig]]:
        return (RootConfig,)

    def servlet_config_classes(self) -> Sequence[Type[WebConfig]]:
        return (WebConfig,)

    def servlet_mappings(self) -> Tuple[str, ...]:
        return (self.settings.servlet_mapping,)

    def customize_registration(self, registration: ServletRegistration) -> None:
        """
        Attach the multipart policy to the front controller.

        Raises:
            UploadDirectoryError: If the upload directory cannot be created
        """
        location = ensure_upload_directory(self.settings.upload_dir)
        registration.multipart_config = MultipartConfig(location=location)

    def create_root_context(self) -> ApplicationContext:
        """
        Build the root context.

        Raises:
            MissingPropertyError: If a db.* property is missing
            ComponentScanError: If a component lies outside the root scan
        """
        context: Optional[ApplicationContext] = None
        for config_cls in self.root_config_classes():
            context = config_cls(self.settings).create_context(parent=context)
        if context is None:
            raise ConfigurationError("No root configuration classes")
        return context

    def create_web_context(
        self, root_context: ApplicationContext, registration: ServletRegistration
    ) -> Tuple[WebConfig, ApplicationContext]:
        if registration.multipart_config is None:
            raise ConfigurationError("Front controller registration has no multipart config")
        web_config: Optional[WebConfig] = None
        context = root_context
        for config_cls in self.servlet_config_classes():
            web_config = config_cls(self.settings, registration.multipart_config)
            context = web_config.create_context(parent=context)
        if web_config is None:
            raise ConfigurationError("No servlet configuration classes")
        return web_config, context

    def create_app(self) -> FastAPI:
        """
        Create the application.

        Returns:
            Outer FastAPI application with the front controller at its mapping

        Raises:
            ConfigurationError: On any startup configuration failure
        """
        registration = ServletRegistration(
            name=DISPATCHER_NAME, mappings=self.servlet_mappings()
        )
        self.customize_registration(registration)

        root_context = self.create_root_context()
        web_config, web_context = self.create_web_context(root_context, registration)

        @asynccontextmanager
        async def lifespan(app: FastAPI) -> AsyncIterator[None]:
            logger.info("Application starting up...")
            data_source = root_context.get(PooledDataSource)
            await data_source.open()
            try:
                yield
            finally:
                logger.info("Application shutting down...")
                try:
                    await web_context.close()
                finally:
                    await root_context.close()

        is_dev = self.settings.is_development()
        mount_paths = [_mount_path(mapping) for mapping in registration.mappings]
        if mount_paths == ["/"]:
            app = build_dispatcher(
                web_config,
                web_context,
                is_dev,
                lifespan=lifespan,
                strict_view_controllers=self.strict_view_controllers,
            )
        else:
            app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
            dispatcher = build_dispatcher(
                web_config,
                web_context,
                is_dev,
                strict_view_controllers=self.strict_view_controllers,
            )
            for mount_path in mount_paths:
                app.mount(mount_path, dispatcher, name=registration.name)

        app.state.root_context = root_context
        app.state.web_context = web_context
        app.state.registration = registration
        logger.info(
            f"Front controller '{registration.name}' mapped to {', '.join(registration.mappings)}"
        )
        return app
