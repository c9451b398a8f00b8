"""Application contexts and the configuration classes that populate them."""

from .application_context import ApplicationContext
from .configuration import Configuration
from .scanning import ComponentScan

__all__ = ["ApplicationContext", "ComponentScan", "Configuration"]
