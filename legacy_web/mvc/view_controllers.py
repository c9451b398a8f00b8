"""Handler-less routes that render a fixed view."""

from dataclasses import dataclass
from typing import Any, Callable, Coroutine, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from loguru import logger
from starlette.responses import Response
from starlette.routing import Route

from legacy.core.exceptions import RouteConflictError
from legacy_web.mvc.view_resolver import ViewResolver


@dataclass
class ViewController:
    path: str
    view_name: Optional[str] = None
    status_code: int = 200

    def set_view_name(self, view_name: str) -> "ViewController":
        self.view_name = view_name
        return self

    def set_status_code(self, status_code: int) -> "ViewController":
        self.status_code = status_code
        return self


class ViewControllerRegistry:
    """
    Collects path -> view mappings and installs them on an application.

    A view controller only fills a gap: when the application already has a
    GET handler for the same path, the handler wins and the view controller
    is recorded in :attr:`overridden`. With ``strict`` the conflict aborts
    startup instead.
    """

    def __init__(self, view_resolver: ViewResolver, strict: bool = False):
        self.view_resolver = view_resolver
        self.strict = strict
        self.registrations: List[ViewController] = []
        self.overridden: List[ViewController] = []

    def add_view_controller(self, path: str) -> ViewController:
        controller = ViewController(path)
        self.registrations.append(controller)
        return controller

    def apply(self, app: FastAPI) -> None:
        """
        Register the view routes on ``app``.

        Must run after every controller router has been included.

        Raises:
            RouteConflictError: If strict and a handler already serves a path
            ValueError: If a view controller has no view name
        """
        for controller in self.registrations:
            if not controller.view_name:
                raise ValueError(f"View controller for '{controller.path}' has no view name")
            if _has_get_handler(app, controller.path):
                if self.strict:
                    raise RouteConflictError(controller.path, controller.view_name)
                logger.warning(
                    f"Path '{controller.path}' has an explicit handler; "
                    f"view '{controller.view_name}' is not registered"
                )
                self.overridden.append(controller)
                continue
            app.add_api_route(
                controller.path,
                self._endpoint(controller),
                methods=["GET"],
                response_class=HTMLResponse,
                include_in_schema=False,
                name=f"view:{controller.view_name}",
            )
            logger.debug(f"View controller '{controller.path}' -> '{controller.view_name}'")

    def _endpoint(
        self, controller: ViewController
    ) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        view_resolver = self.view_resolver

        async def render_view(request: Request) -> Response:
            return view_resolver.render(
                request, controller.view_name, status_code=controller.status_code
            )

        return render_view


def _has_get_handler(app: FastAPI, path: str) -> bool:
    for route in app.router.routes:
        if isinstance(route, Route) and route.path == path and "GET" in (route.methods or ()):
            return True
    return False
