"""File upload handling for the front controller."""

from .config import MultipartConfig
from .middleware import MultipartSizeLimitMiddleware
from .resolver import MultipartRequest, MultipartResolver, MultipartRoute, is_on_disk

__all__ = [
    "MultipartConfig",
    "MultipartRequest",
    "MultipartResolver",
    "MultipartRoute",
    "MultipartSizeLimitMiddleware",
    "is_on_disk",
]
