"""Base class for the classes that describe one application context."""

from typing import ClassVar, Optional, Tuple

from legacy.context.application_context import ApplicationContext
from legacy.context.scanning import ComponentScan


class Configuration:
    """
    Declarative description of a context.

    Subclasses set ``name``, ``component_scan`` and ``components`` and
    override :meth:`register_beans` for framework objects.
    """

    name: ClassVar[str] = "application"
    component_scan: ClassVar[ComponentScan] = ComponentScan(base_packages=())
    components: ClassVar[Tuple[type, ...]] = ()

    def register_beans(self, context: ApplicationContext) -> None:
        """Register framework beans. Default: none."""

    def validate(self) -> None:
        """Checks run before the context is built. Default: none."""

    def create_context(self, parent: Optional[ApplicationContext] = None) -> ApplicationContext:
        """
        Build and refresh the context.

        Args:
            parent: Context consulted for dependencies this one lacks

        Returns:
            Refreshed context

        Raises:
            ConfigurationError: If a component is out of scope or cannot be wired
        """
        self.validate()
        context = ApplicationContext(self.name, self.component_scan, parent=parent)
        self.register_beans(context)
        for component in self.components:
            context.register(component)
        context.refresh()
        return context
