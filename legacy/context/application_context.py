"""Constructor-injection container with parent/child hierarchy."""

import inspect
import typing
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar, Union

from loguru import logger

from legacy.context.scanning import ComponentScan
from legacy.core.exceptions import (
    ComponentScanError,
    ConfigurationError,
    NoSuchComponentError,
)

T = TypeVar("T")

CloseCallback = Callable[[Any], Union[None, Awaitable[None]]]


class _Registration:
    __slots__ = ("bean_type", "factory", "on_close", "is_component")

    def __init__(
        self,
        bean_type: type,
        factory: Callable[[], Any],
        on_close: Optional[CloseCallback],
        is_component: bool,
    ):
        self.bean_type = bean_type
        self.factory = factory
        self.on_close = on_close
        self.is_component = is_component


class ApplicationContext:
    """
    Singleton registry for one tier of the application.

    Components are classes registered through :meth:`register`; their module
    must fall inside the context's :class:`ComponentScan`. Beans are
    framework objects registered through :meth:`register_bean` with a
    factory, and are not subject to scanning.

    Lookups that the context cannot satisfy fall through to the parent, so a
    child (web) context sees every root singleton while the root never sees
    the child's.

    Components that define ``post_process_component(component)`` are
    post-processors: every other component instantiated in this context or a
    descendant is passed through them.
    """

    def __init__(
        self,
        name: str,
        scan: ComponentScan,
        parent: Optional["ApplicationContext"] = None,
    ):
        self.name = name
        self.scan = scan
        self.parent = parent
        self._registrations: Dict[type, _Registration] = {}
        self._singletons: Dict[type, Any] = {}
        self._creation_order: List[type] = []
        self._in_creation: List[type] = []
        self._closed = False

    def register(self, component_cls: Type[T]) -> Type[T]:
        """
        Register a component class.

        Args:
            component_cls: Class whose constructor parameters are resolved by type

        Returns:
            The class, so the method can be used as a decorator

        Raises:
            ComponentScanError: If the class lives outside this context's scan
        """
        reason = self.scan.rejection_reason(component_cls.__module__)
        if reason is not None:
            raise ComponentScanError(component_cls.__qualname__, self.name, reason)
        self._add(_Registration(component_cls, component_cls, None, is_component=True))
        return component_cls

    def register_bean(
        self,
        bean_type: Type[T],
        factory: Callable[[], T],
        on_close: Optional[CloseCallback] = None,
    ) -> None:
        """
        Register a framework bean.

        Args:
            bean_type: Type the bean is looked up by
            factory: Zero-argument callable producing the singleton
            on_close: Called with the instance (and awaited if needed) on close()
        """
        self._add(_Registration(bean_type, factory, on_close, is_component=False))

    def _add(self, registration: _Registration) -> None:
        if registration.bean_type in self._registrations:
            raise ConfigurationError(
                f"{registration.bean_type.__qualname__} is already registered "
                f"in the {self.name} context"
            )
        self._registrations[registration.bean_type] = registration
        logger.debug(f"[{self.name}] registered {registration.bean_type.__qualname__}")

    def contains(self, bean_type: type) -> bool:
        """Whether this context itself (not its parent) can supply ``bean_type``."""
        return self._find_registration(bean_type) is not None

    def _find_registration(self, bean_type: type) -> Optional[_Registration]:
        registration = self._registrations.get(bean_type)
        if registration is not None:
            return registration
        for registered_type, candidate in self._registrations.items():
            if isinstance(registered_type, type) and issubclass(registered_type, bean_type):
                return candidate
        return None

    def get(self, bean_type: Type[T]) -> T:
        """
        Return the singleton for ``bean_type``, creating it on first use.

        Raises:
            NoSuchComponentError: If neither this context nor an ancestor has it
            ConfigurationError: On a circular constructor dependency
        """
        if self._closed:
            raise ConfigurationError(f"The {self.name} context is closed")

        registration = self._find_registration(bean_type)
        if registration is None:
            if self.parent is not None:
                return self.parent.get(bean_type)
            raise NoSuchComponentError(bean_type.__qualname__, self.name)

        key = registration.bean_type
        if key in self._singletons:
            return self._singletons[key]

        if key in self._in_creation:
            chain = " -> ".join(t.__qualname__ for t in self._in_creation + [key])
            raise ConfigurationError(f"Circular dependency in the {self.name} context: {chain}")

        self._in_creation.append(key)
        try:
            instance = self._instantiate(registration)
        finally:
            self._in_creation.pop()

        self._singletons[key] = instance
        self._creation_order.append(key)
        return instance

    def _instantiate(self, registration: _Registration) -> Any:
        if not registration.is_component:
            return registration.factory()

        component_cls = registration.bean_type
        instance = component_cls(**self._resolve_arguments(component_cls))
        if not _is_post_processor(component_cls):
            for processor in self._post_processors():
                instance = processor.post_process_component(instance)
        logger.debug(f"[{self.name}] created {component_cls.__qualname__}")
        return instance

    def _resolve_arguments(self, component_cls: type) -> Dict[str, Any]:
        signature = inspect.signature(component_cls.__init__)
        hints = typing.get_type_hints(component_cls.__init__)
        arguments: Dict[str, Any] = {}
        for name, parameter in signature.parameters.items():
            if name == "self" or parameter.kind in (
                inspect.Parameter.VAR_POSITIONAL,
                inspect.Parameter.VAR_KEYWORD,
            ):
                continue
            dependency = hints.get(name)
            if not isinstance(dependency, type):
                if parameter.default is not inspect.Parameter.empty:
                    continue
                raise ConfigurationError(
                    f"Cannot inject parameter '{name}' of {component_cls.__qualname__}: "
                    f"it needs a class annotation"
                )
            try:
                arguments[name] = self.get(dependency)
            except NoSuchComponentError:
                if parameter.default is inspect.Parameter.empty:
                    raise
        return arguments

    def _post_processors(self) -> List[Any]:
        processors: List[Any] = []
        if self.parent is not None:
            processors.extend(self.parent._post_processors())
        for registration in list(self._registrations.values()):
            if registration.is_component and _is_post_processor(registration.bean_type):
                processors.append(self.get(registration.bean_type))
        return processors

    def refresh(self) -> None:
        """Eagerly create every registered singleton, post-processors first."""
        ordered = sorted(
            self._registrations.values(),
            key=lambda r: not (r.is_component and _is_post_processor(r.bean_type)),
        )
        for registration in ordered:
            self.get(registration.bean_type)
        logger.info(f"[{self.name}] context refreshed with {len(self._singletons)} singletons")

    async def close(self) -> None:
        """
        Run close callbacks in reverse creation order. The parent is left open.

        Every callback runs even when an earlier one fails; the first failure
        is re-raised once the context is closed.
        """
        if self._closed:
            return
        first_error: Optional[BaseException] = None
        for bean_type in reversed(self._creation_order):
            registration = self._registrations[bean_type]
            if registration.on_close is None:
                continue
            try:
                result = registration.on_close(self._singletons[bean_type])
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.exception(f"[{self.name}] closing {bean_type.__qualname__} failed: {e}")
                if first_error is None:
                    first_error = e
        self._singletons.clear()
        self._creation_order.clear()
        self._closed = True
        logger.info(f"[{self.name}] context closed")
        if first_error is not None:
            raise first_error


def _is_post_processor(cls: type) -> bool:
    return callable(getattr(cls, "post_process_component", None))
