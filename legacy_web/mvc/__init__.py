"""View resolution, view controllers and static resources."""

from .resources import ResourceHandlerRegistry
from .view_controllers import ViewControllerRegistry
from .view_resolver import ViewResolver

__all__ = ["ResourceHandlerRegistry", "ViewControllerRegistry", "ViewResolver"]
