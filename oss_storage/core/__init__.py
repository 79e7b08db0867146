"""
Core storage concepts.

Nothing here talks to the network. Models, error types and URL formatting
live here so they can be tested without a bucket.
"""

from .errors import (
    ConfigurationError,
    DeleteError,
    NotFoundError,
    StorageError,
    TransportError,
    UploadError,
)
from .models import (
    Credentials,
    DeleteOutcome,
    DeleteResult,
    LocalFile,
    UrlPolicy,
    normalize_key,
)
from .urls import UrlBuilder

__all__ = [
    "ConfigurationError",
    "Credentials",
    "DeleteError",
    "DeleteOutcome",
    "DeleteResult",
    "LocalFile",
    "NotFoundError",
    "StorageError",
    "TransportError",
    "UploadError",
    "UrlBuilder",
    "UrlPolicy",
    "normalize_key",
]
