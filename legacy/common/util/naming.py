"""Column / property name conversions used by the row mapper."""

import re

_UNDERSCORE_RUN = re.compile(r"_+([a-zA-Z0-9])")


def to_camel_case(name: str) -> str:
    """
    Convert a snake_case column name to camelCase.

    Leading underscores are kept; upper-case column names (as returned by
    some databases) are lowered first.

    Examples:
        >>> to_camel_case("created_at")
        'createdAt'
        >>> to_camel_case("USER_ID")
        'userId'
        >>> to_camel_case("id")
        'id'
    """
    stripped = name.lstrip("_")
    prefix = name[: len(name) - len(stripped)]
    if stripped.isupper():
        stripped = stripped.lower()
    camel = _UNDERSCORE_RUN.sub(lambda m: m.group(1).upper(), stripped)
    return prefix + camel


def normalize_property_name(name: str) -> str:
    """
    Key used to match a column to a field: case and underscores are ignored.

    ``created_at``, ``CREATED_AT`` and ``createdAt`` all normalize to
    ``createdat``.
    """
    return name.replace("_", "").lower()
