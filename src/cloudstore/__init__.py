"""cloudstore: store images on Cloudinary and get delivery URLs back.

Public API:
    - UploadAdapter: save/exists/delete/read/url_for
    - Config, RetinaOptions: Adapter configuration
    - ImageFile: Input descriptor for save()
"""

from __future__ import annotations

import logging

from cloudstore.adapter import UploadAdapter
from cloudstore.config import Config, RetinaOptions
from cloudstore.errors import (
    APIError,
    CloudstoreError,
    ConfigurationError,
    DeleteError,
    ReadError,
    UploadError,
)
from cloudstore.image import ImageFile

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("cloudstore")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("cloudstore").addHandler(logging.NullHandler())

__all__ = [
    "APIError",
    "CloudstoreError",
    "Config",
    "ConfigurationError",
    "DeleteError",
    "ImageFile",
    "ReadError",
    "RetinaOptions",
    "UploadAdapter",
    "UploadError",
]
