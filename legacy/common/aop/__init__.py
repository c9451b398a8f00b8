"""Cross-cutting aspects applied to root and web components."""

from .transactional import TransactionalAspect, is_transactional, transactional

__all__ = ["TransactionalAspect", "is_transactional", "transactional"]
