"""
Storage adapter for upload handling.

An upload framework talks to storage through two calls: store a local
file, or retrieve a previously stored one by identifier. Both return a
RemoteFile handle that can read, delete and hand out a URL for the
stored object.

Usage:
    storage = OssStorage.from_settings()
    remote = storage.store(LocalFile.from_path("/tmp/avatar.png"))
    remote.url()
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from .config.settings import Settings, get_settings
from .core.errors import ConfigurationError
from .core.models import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_URL_EXPIRY_SECONDS,
    KEY_SEPARATOR,
    Credentials,
    LocalFile,
    normalize_key,
)
from .core.urls import validate_host
from .infrastructure.oss.connection import Connection

logger = logging.getLogger(__name__)

FileSource = Union[LocalFile, str, os.PathLike]


@dataclass(frozen=True)
class Uploader:
    """
    Per-uploader storage configuration.

    Holds the bucket credentials and decides where files are kept:
    store_path("b.png") with store_dir "a" is "a/b.png".
    """
    credentials: Credentials
    store_dir: str = "uploads"
    mock_mode: bool = False
    default_content_type: str = DEFAULT_CONTENT_TYPE
    url_expiry_seconds: int = DEFAULT_URL_EXPIRY_SECONDS

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Uploader":
        settings = settings or get_settings()
        return cls(
            credentials=settings.to_credentials(),
            store_dir=settings.oss_store_dir,
            mock_mode=settings.oss_mock_mode,
            default_content_type=settings.oss_default_content_type,
            url_expiry_seconds=settings.oss_url_expiry_seconds,
        )

    def store_path(self, identifier: str) -> str:
        if not self.store_dir:
            return identifier
        return KEY_SEPARATOR.join([self.store_dir.rstrip(KEY_SEPARATOR), identifier.lstrip(KEY_SEPARATOR)])

    def connect(self) -> Connection:
        return Connection(
            self.credentials,
            mock_mode=self.mock_mode,
            default_content_type=self.default_content_type,
            url_expiry_seconds=self.url_expiry_seconds,
        )


def as_local_file(file: FileSource) -> LocalFile:
    if isinstance(file, LocalFile):
        return file
    return LocalFile.from_path(file)


class RemoteFile:
    """
    A stored object, addressed by its path in the bucket.

    The connection is created on first use and kept for the life of the
    handle. Headers from the last read are cached so content_type can be
    answered without another request.
    """

    def __init__(self, uploader: Uploader, path: str, connection: Optional[Connection] = None) -> None:
        self.uploader = uploader
        self.path = path
        self._connection = connection
        self._headers: dict[str, str] = {}

    def __repr__(self) -> str:
        return f"RemoteFile(bucket={self.uploader.credentials.bucket!r}, key={self.key!r})"

    @property
    def key(self) -> str:
        return normalize_key(self.path)

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            self._connection = self.uploader.connect()
        return self._connection

    @property
    def headers(self) -> dict[str, str]:
        return self._headers

    @property
    def content_type(self) -> Optional[str]:
        return self._headers.get("content-type")

    @content_type.setter
    def content_type(self, value: Optional[str]) -> None:
        if value is None:
            self._headers.pop("content-type", None)
        else:
            self._headers["content-type"] = value

    def store(self, file: FileSource, content_type: Optional[str] = None) -> str:
        """Upload a local file to this path. Returns the public URL."""
        local = as_local_file(file)
        content_type = content_type or local.content_type or self.uploader.default_content_type
        url = self.connection.put(self.path, local.path, content_type)
        self.content_type = content_type
        return url

    def read(self) -> bytes:
        body, headers = self.connection.get(self.path)
        self._headers = dict(headers)
        return body

    def delete(self) -> bool:
        """Delete the object. Returns False instead of raising when it fails."""
        return self.connection.delete(self.path).deleted

    def url(self) -> str:
        return self.connection.url(self.path)


class OssStorage:
    """
    Entry point for an upload framework.

    The host is checked when the storage is built so a misconfigured
    uploader fails at startup.
    """

    def __init__(self, uploader: Uploader) -> None:
        validate_host(uploader.credentials.host)
        self.uploader = uploader

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "OssStorage":
        settings = settings or get_settings()

        missing = settings.validate_required_fields()
        if missing:
            logger.error(
                "Missing required storage settings",
                extra={"missing_fields": missing}
            )
            raise ConfigurationError(f"Missing required storage settings: {', '.join(missing)}")

        return cls(Uploader.from_settings(settings))

    def store(self, file: FileSource) -> RemoteFile:
        local = as_local_file(file)
        remote = RemoteFile(self.uploader, self.uploader.store_path(local.filename))
        remote.store(local)

        logger.info(
            "Stored file",
            extra={
                "bucket": self.uploader.credentials.bucket,
                "key": remote.key,
                "content_type": remote.content_type,
                "size_bytes": local.size,
            }
        )

        return remote

    def retrieve(self, identifier: str) -> RemoteFile:
        return RemoteFile(self.uploader, self.uploader.store_path(identifier))
