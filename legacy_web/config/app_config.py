"""Front-controller assembly helpers.

Each helper wires one concern of the web context onto the FastAPI
application so that the initializer reads as a sequence of steps.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import Lifespan

from legacy import __version__
from legacy.context import ApplicationContext
from legacy_web.config.web_config import WebConfig
from legacy_web.multipart.middleware import MultipartSizeLimitMiddleware
from legacy_web.multipart.resolver import MultipartResolver, MultipartRoute
from legacy_web.mvc.resources import ResourceHandlerRegistry
from legacy_web.mvc.view_controllers import ViewControllerRegistry
from legacy_web.mvc.view_resolver import ViewResolver


def get_openapi_metadata(is_dev: bool) -> Dict[str, Any]:
    """
    Return the OpenAPI metadata dict for FastAPI app instantiation.

    Args:
        is_dev: Whether interactive docs are enabled

    Returns:
        Dictionary of keyword arguments suitable for FastAPI(**kwargs)
    """
    return {
        "title": "Legacy Web Application",
        "version": __version__,
        "docs_url": "/docs" if is_dev else None,
        "redoc_url": "/redoc" if is_dev else None,
        "openapi_url": "/openapi.json" if is_dev else None,
    }


def configure_interceptors(app: FastAPI, web_config: WebConfig, context: ApplicationContext) -> None:
    """
    Install interceptor components as middleware.

    The first interceptor in ``web_config.components`` is the outermost.
    The multipart size check sits inside them so its 413 carries the
    correlation header.
    """
    resolver = context.get(MultipartResolver)
    app.add_middleware(
        MultipartSizeLimitMiddleware, max_request_size=resolver.config.max_request_size
    )
    interceptors = [
        context.get(component)
        for component in web_config.components
        if callable(getattr(component, "dispatch", None))
    ]
    # add_middleware prepends, so install innermost first
    for interceptor in reversed(interceptors):
        app.add_middleware(BaseHTTPMiddleware, dispatch=interceptor.dispatch)


def register_exception_handlers(
    app: FastAPI, web_config: WebConfig, context: ApplicationContext
) -> None:
    for component in web_config.components:
        if callable(getattr(component, "exception_handlers", None)):
            context.get(component).install(app)


def build_dispatcher(
    web_config: WebConfig,
    context: ApplicationContext,
    is_dev: bool,
    lifespan: Optional[Lifespan] = None,
    strict_view_controllers: bool = False,
) -> FastAPI:
    """
    Build the front controller from a refreshed web context.

    Order matters: controllers are included before the view controllers are
    applied so that an explicit handler for ``/`` is detected.

    Args:
        web_config: Configuration the context was built from
        context: Refreshed web context
        is_dev: Enables interactive docs
        lifespan: Startup/shutdown handler when the dispatcher is the outermost app
        strict_view_controllers: Fail on a view/handler path conflict

    Returns:
        FastAPI application

    Raises:
        RouteConflictError: On a path conflict with strict_view_controllers
    """
    app = FastAPI(**get_openapi_metadata(is_dev), lifespan=lifespan)
    app.router.route_class = MultipartRoute
    app.state.context = context
    app.state.multipart_resolver = context.get(MultipartResolver)

    register_exception_handlers(app, web_config, context)
    web_config.configure_routes(app, context)

    resources = ResourceHandlerRegistry(base_dir=Path.cwd())
    web_config.add_resource_handlers(resources)
    resources.apply(app)

    view_controllers = ViewControllerRegistry(
        context.get(ViewResolver), strict=strict_view_controllers
    )
    web_config.add_view_controllers(view_controllers)
    view_controllers.apply(app)
    app.state.view_controllers = view_controllers

    configure_interceptors(app, web_config, context)
    return app
