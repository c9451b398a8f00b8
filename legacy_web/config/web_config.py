"""Web application context: controllers, advice, interceptors and MVC beans."""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from legacy.constants import Resources, Views
from legacy.context import ApplicationContext, ComponentScan, Configuration
from legacy.core.settings import AppSettings
from legacy_web.common.advice import ProblemDetailsAdvice
from legacy_web.common.interceptor import CorrelationInterceptor, RequestTrackingInterceptor
from legacy_web.health.controller import HealthController
from legacy_web.multipart.config import MultipartConfig
from legacy_web.multipart.resolver import MultipartResolver
from legacy_web.mvc.resources import ResourceHandlerRegistry
from legacy_web.mvc.view_controllers import ViewControllerRegistry
from legacy_web.mvc.view_resolver import ViewResolver

WEB_SCAN = ComponentScan(
    base_packages=(
        "legacy_web.*.controller",
        "legacy_web.common.advice",
        "legacy_web.common.interceptor",
    ),
    exclude=(
        "*.service",
        "*.repository",
        "legacy.*",
    ),
)


class WebConfig(Configuration):
    """Front-controller context; its parent is the root context."""

    name = "web"
    component_scan = WEB_SCAN
    # interceptors run in this order around every request
    components = (
        CorrelationInterceptor,
        RequestTrackingInterceptor,
        ProblemDetailsAdvice,
        HealthController,
    )

    def __init__(self, settings: AppSettings, multipart_config: MultipartConfig):
        """
        Initialize web configuration.

        Args:
            settings: Application settings (template and static directories)
            multipart_config: Upload policy set on the front-controller registration
        """
        self.settings = settings
        self.multipart_config = multipart_config
        self._view_resolver: Optional[ViewResolver] = None
        self._multipart_resolver: Optional[MultipartResolver] = None

    def view_resolver(self) -> ViewResolver:
        if self._view_resolver is None:
            self._view_resolver = ViewResolver(
                self.settings.templates_dir, prefix=Views.PREFIX, suffix=Views.SUFFIX
            )
        return self._view_resolver

    def multipart_resolver(self) -> MultipartResolver:
        if self._multipart_resolver is None:
            self._multipart_resolver = MultipartResolver(self.multipart_config)
        return self._multipart_resolver

    def add_view_controllers(self, registry: ViewControllerRegistry) -> None:
        registry.add_view_controller(Views.HOME_PATH).set_view_name(Views.HOME_VIEW)

    def add_resource_handlers(self, registry: ResourceHandlerRegistry) -> None:
        registry.add_resource_handler(Resources.URL_PATTERN).add_resource_locations(
            self.static_location
        )

    @property
    def static_location(self) -> Path:
        return Path(self.settings.static_dir)

    def register_beans(self, context: ApplicationContext) -> None:
        context.register_bean(ViewResolver, self.view_resolver)
        context.register_bean(MultipartResolver, self.multipart_resolver)

    def configure_routes(self, app: FastAPI, context: ApplicationContext) -> None:
        """
        Include the router of every controller component.

        Routers are built from the post-processed instance, so endpoints are
        the woven methods (``@transactional`` and friends).
        """
        for component in self.components:
            create_router = getattr(context.get(component), "create_router", None)
            if create_router is not None:
                app.include_router(create_router())
