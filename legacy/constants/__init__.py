"""Fixed policy values for the composition root.

All constants can be imported directly from this package:
    from legacy.constants import Database, Multipart, Views
"""

from .database import Database, Properties
from .multipart import Multipart
from .web import Resources, Views

__all__ = [
    "Database",
    "Properties",
    "Multipart",
    "Resources",
    "Views",
]
