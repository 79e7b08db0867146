"""
Storage error types.

Bucket clients translate botocore failures into these so callers never
need to import botocore to handle them.
"""


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


class ConfigurationError(StorageError):
    """Raised when the storage configuration cannot be used."""
    pass


class UploadError(StorageError):
    """Raised when an object cannot be written to the bucket."""
    pass


class TransportError(StorageError):
    """Raised when reading from the bucket or signing a URL fails."""
    pass


class NotFoundError(TransportError):
    """Raised when the requested object does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Object not found: {key}")
        self.key = key


class DeleteError(StorageError):
    """Raised by bucket clients when a delete fails. Connections absorb it."""
    pass
