"""Declarative transactions for component methods."""

import functools
import inspect
from typing import Any, Callable, Coroutine, TypeVar

from loguru import logger

from legacy.db.transaction import TransactionManager

F = TypeVar("F", bound=Callable[..., Coroutine[Any, Any, Any]])

_MARKER = "__transactional__"


def transactional(func: F) -> F:
    """
    Mark an async component method to run inside a transaction.

    The marker takes effect once the component is created by a context that
    has a :class:`TransactionalAspect`.

    Raises:
        TypeError: If ``func`` is not a coroutine function
    """
    if not inspect.iscoroutinefunction(func):
        raise TypeError(f"@transactional requires an async function, got {func.__qualname__}")
    setattr(func, _MARKER, True)
    return func


def is_transactional(func: Any) -> bool:
    return bool(getattr(func, _MARKER, False))


class TransactionalAspect:
    """Wraps ``@transactional`` methods of every component in a transaction."""

    def __init__(self, transaction_manager: TransactionManager):
        self.transaction_manager = transaction_manager

    def _wrap(self, method: Callable[..., Coroutine[Any, Any, Any]]) -> Callable[..., Any]:
        @functools.wraps(method)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            async with self.transaction_manager.transaction():
                return await method(*args, **kwargs)

        return wrapper

    def post_process_component(self, component: Any) -> Any:
        woven = []
        for name, func in inspect.getmembers(type(component), inspect.iscoroutinefunction):
            if is_transactional(func):
                setattr(component, name, self._wrap(getattr(component, name)))
                woven.append(name)
        if woven:
            logger.debug(
                f"Transactional methods woven on {type(component).__qualname__}: {', '.join(woven)}"
            )
        return component
