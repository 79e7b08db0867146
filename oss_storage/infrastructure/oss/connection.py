"""
Connections to an OSS bucket.

A Connection maps the three file operations (put, get, delete) and URL
building onto bucket client calls. It owns a ClientFactory that creates
at most one public and one internal client, each on first use.

Transfers (put and get) go through the internal endpoint when the
uploader is configured for it, which keeps traffic inside the datacenter
when the application and the bucket share a region. Deletes and signed
URLs always use the public client.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from ...core.errors import NotFoundError, StorageError
from ...core.models import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_URL_EXPIRY_SECONDS,
    Credentials,
    DeleteOutcome,
    DeleteResult,
    UrlPolicy,
    normalize_key,
)
from ...core.urls import UrlBuilder
from .client import BucketClient, create_bucket_client

logger = logging.getLogger(__name__)

ClientCreator = Callable[..., BucketClient]


class ClientFactory:
    """
    Lazily creates and caches bucket clients, one per endpoint flag.

    get_client(False) always returns the same public client and
    get_client(True) the same internal client. Creation is serialized
    by a lock so concurrent first calls still build only one client.
    """

    def __init__(
        self,
        credentials: Credentials,
        mock_mode: bool = False,
        create_client: ClientCreator = create_bucket_client,
    ) -> None:
        self._credentials = credentials
        self._mock_mode = mock_mode
        self._create_client = create_client
        self._clients: dict[bool, BucketClient] = {}
        self._lock = threading.Lock()

    def get_client(self, internal: bool = False) -> BucketClient:
        client = self._clients.get(internal)
        if client is not None:
            return client

        with self._lock:
            client = self._clients.get(internal)
            if client is None:
                client = self._create_client(
                    self._credentials,
                    internal=internal,
                    mock_mode=self._mock_mode,
                )
                self._clients[internal] = client
                logger.debug(
                    "Created bucket client",
                    extra={"bucket": self._credentials.bucket, "internal": internal}
                )
        return client


class Connection:
    """
    Storage operations against one bucket.

    The host is validated here, before any client exists, so a bad
    host template fails when the connection is built rather than on
    the first request.
    """

    def __init__(
        self,
        credentials: Credentials,
        mock_mode: bool = False,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
        url_expiry_seconds: int = DEFAULT_URL_EXPIRY_SECONDS,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.credentials = credentials
        self.default_content_type = default_content_type
        self.urls = UrlBuilder(
            credentials.host,
            policy=UrlPolicy.for_credentials(credentials),
            signer=self,
            expires_in=url_expiry_seconds,
        )
        self.clients = client_factory or ClientFactory(credentials, mock_mode=mock_mode)

    @property
    def policy(self) -> UrlPolicy:
        return self.urls.policy

    def put(
        self,
        key: str,
        local_path: Union[str, Path],
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload a local file.

        Returns the public URL of the key, whatever the URL policy.
        Raises UploadError when the upload fails; nothing is retried.
        """
        key = normalize_key(key)
        self._transfer_client().put_object(
            key,
            local_path,
            content_type or self.default_content_type,
        )
        return self.public_url(key)

    def get(self, key: str) -> tuple[bytes, dict[str, str]]:
        """
        Download an object into memory.

        Returns the body and the response headers. Raises NotFoundError
        for a missing object and TransportError for other failures.
        """
        key = normalize_key(key)
        buffer = bytearray()
        headers = self._transfer_client().get_object(key, buffer.extend)
        return bytes(buffer), headers

    def delete(self, key: str) -> DeleteResult:
        """
        Delete an object. Never raises.

        A missing object is reported as NOT_FOUND; any other failure is
        logged and reported as FAILED.
        """
        key = normalize_key(key)
        try:
            self._public_client().delete_object(key)
        except NotFoundError:
            logger.info(
                "Object to delete was already absent",
                extra={"bucket": self.credentials.bucket, "key": key}
            )
            return DeleteResult(key=key, outcome=DeleteOutcome.NOT_FOUND)
        except StorageError as e:
            logger.warning(
                "Failed to delete object",
                extra={"bucket": self.credentials.bucket, "key": key, "error": str(e)}
            )
            return DeleteResult(key=key, outcome=DeleteOutcome.FAILED, error=str(e))

        logger.debug(
            "Deleted object",
            extra={"bucket": self.credentials.bucket, "key": key}
        )
        return DeleteResult(key=key, outcome=DeleteOutcome.DELETED)

    def public_url(self, key: str) -> str:
        return self.urls.public_url(key)

    def signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        return self.urls.signed_url(key, expires_in=expires_in)

    def url(self, key: str) -> str:
        """Public or signed URL, depending on the bucket's read access."""
        return self.urls.url(key)

    def object_url(self, key: str, sign: bool = True, expires_in: int = DEFAULT_URL_EXPIRY_SECONDS) -> str:
        return self._public_client().object_url(key, sign=sign, expires_in=expires_in)

    def _public_client(self) -> BucketClient:
        return self.clients.get_client(internal=False)

    def _transfer_client(self) -> BucketClient:
        return self.clients.get_client(internal=self.credentials.use_internal_endpoint)
