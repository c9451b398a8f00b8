"""View resolution and static resource constants."""

from typing import Final


class Views:
    """Logical view name -> template path convention."""

    TEMPLATES_DIR: Final[str] = "templates"
    PREFIX: Final[str] = "views/"
    SUFFIX: Final[str] = ".html"
    HOME_PATH: Final[str] = "/"
    HOME_VIEW: Final[str] = "index"


class Resources:
    """Static asset handler mapping."""

    URL_PATTERN: Final[str] = "/resources/**"
    LOCATION: Final[str] = "resources/"
