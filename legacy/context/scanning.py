"""Package scanning rules that decide which context may own a component."""

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Optional, Tuple


def _matches(module: str, pattern: str) -> bool:
    # a pattern covers the package it names and everything below it
    return fnmatchcase(module, pattern) or fnmatchcase(module, f"{pattern}.*")


@dataclass(frozen=True)
class ComponentScan:
    """
    Include/exclude rules over dotted module names.

    Patterns use shell wildcards: ``legacy.*.service`` covers
    ``legacy.health.service`` and its submodules. Exclusions win over
    inclusions.

    Attributes:
        base_packages: Packages whose components the context may register
        exclude: Packages the context must never register
    """

    base_packages: Tuple[str, ...]
    exclude: Tuple[str, ...] = ()

    def rejection_reason(self, module: str) -> Optional[str]:
        """
        Explain why ``module`` is out of scope.

        Returns:
            None when the module may be registered, otherwise the reason
        """
        for pattern in self.exclude:
            if _matches(module, pattern):
                return f"module '{module}' is excluded by '{pattern}'"
        if not any(_matches(module, pattern) for pattern in self.base_packages):
            return (
                f"module '{module}' is outside the scanned packages "
                f"({', '.join(self.base_packages)})"
            )
        return None

    def includes(self, module: str) -> bool:
        return self.rejection_reason(module) is None
