"""Provider implementations."""

from .base import MediaProvider
from .cloudinary import CloudinaryProvider
from .mock import MockProvider

__all__ = [
    "CloudinaryProvider",
    "MediaProvider",
    "MockProvider",
]
