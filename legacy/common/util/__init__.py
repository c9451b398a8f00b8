"""Shared utilities."""

from .masking import mask_database_url
from .naming import normalize_property_name, to_camel_case

__all__ = ["mask_database_url", "normalize_property_name", "to_camel_case"]
