"""
Bucket clients for OSS object storage.

The real client talks to the bucket through its S3-compatible API with
boto3, so request signing, retries and transport all come from botocore.
Each client is scoped to a single bucket and a single endpoint (public
or datacenter-internal).

Mock mode keeps objects in memory, which lets the adapter run end to end
without credentials or a bucket.
"""

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, Union
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...core.errors import ConfigurationError, DeleteError, NotFoundError, TransportError, UploadError
from ...core.models import DEFAULT_URL_EXPIRY_SECONDS, Credentials

logger = logging.getLogger(__name__)

ChunkHandler = Callable[[bytes], None]

# Error codes OSS and S3 use for a missing object or bucket entry
_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}

# Parsed get_object fields copied into the header mapping
_HEADER_FIELDS = {
    "ContentType": "content-type",
    "ContentLength": "content-length",
    "ETag": "etag",
    "LastModified": "last-modified",
}

DEFAULT_CHUNK_SIZE = 64 * 1024


class BucketClient(Protocol):
    """
    Operations a connection needs from a bucket.

    Implementations raise UploadError, TransportError, NotFoundError and
    DeleteError instead of backend-specific exceptions.
    """

    bucket: str
    endpoint: str

    def put_object(self, key: str, local_path: Union[str, Path], content_type: str) -> None:
        """Upload the bytes of a local file under key."""
        ...

    def get_object(self, key: str, on_chunk: ChunkHandler) -> dict[str, str]:
        """Stream the object to on_chunk and return its response headers."""
        ...

    def delete_object(self, key: str) -> None:
        """Remove the object stored under key."""
        ...

    def object_url(self, key: str, sign: bool = True, expires_in: int = DEFAULT_URL_EXPIRY_SECONDS) -> str:
        """URL for the object, signed for expires_in seconds when sign is set."""
        ...


def _is_not_found(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in _NOT_FOUND_CODES or status == 404


def _response_headers(response: dict) -> dict[str, str]:
    """Lower-cased response headers, falling back to parsed fields."""
    raw = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
    headers = {name.lower(): str(value) for name, value in raw.items()}
    for field, name in _HEADER_FIELDS.items():
        value = response.get(field)
        if value is None or name in headers:
            continue
        headers[name] = value.isoformat() if hasattr(value, "isoformat") else str(value)
    return headers


class OssBucketClient:
    """
    boto3-backed client for one OSS bucket.

    OSS serves the S3 API on the same endpoints as its native API and
    requires virtual-hosted addressing, so requests go to
    {bucket}.oss-{region}.aliyuncs.com.

    Construction does no network I/O; connections are opened by botocore
    on the first request.
    """

    def __init__(
        self,
        credentials: Credentials,
        internal: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.bucket = credentials.bucket
        self.endpoint = credentials.endpoint(internal)
        self.host = credentials.host.rstrip("/")
        self.internal = internal
        self.chunk_size = chunk_size

        boto_config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "virtual"},
        )

        try:
            self._s3_client = boto3.client(
                "s3",
                endpoint_url=credentials.endpoint_url(internal),
                aws_access_key_id=credentials.access_id,
                aws_secret_access_key=credentials.access_secret,
                region_name=credentials.region,
                config=boto_config,
            )
        except (BotoCoreError, ValueError) as e:
            logger.error(
                "Failed to initialize OSS bucket client",
                extra={"bucket": self.bucket, "endpoint": self.endpoint, "error": str(e)}
            )
            raise ConfigurationError(f"Cannot create client for {self.endpoint}: {e}") from e

        logger.info(
            "Initialized OSS bucket client",
            extra={
                "bucket": self.bucket,
                "endpoint": self.endpoint,
                "internal": internal,
            }
        )

    def put_object(self, key: str, local_path: Union[str, Path], content_type: str) -> None:
        try:
            body = open(local_path, "rb")
        except OSError as e:
            logger.error(
                "Failed to read local file for upload",
                extra={"key": key, "local_path": str(local_path), "error": str(e)}
            )
            raise UploadError(f"Cannot read {local_path}: {e}") from e

        # botocore timeouts subclass OSError, so only the open() above
        # counts as a local read failure.
        with body:
            try:
                self._s3_client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=body,
                    ContentType=content_type,
                )
            except (ClientError, BotoCoreError) as e:
                logger.error(
                    "Failed to upload object",
                    extra={"bucket": self.bucket, "key": key, "error": str(e)}
                )
                raise UploadError(f"Upload failed: {e}") from e

        logger.debug(
            "Uploaded object",
            extra={"bucket": self.bucket, "key": key, "content_type": content_type}
        )

    def get_object(self, key: str, on_chunk: ChunkHandler) -> dict[str, str]:
        try:
            response = self._s3_client.get_object(Bucket=self.bucket, Key=key)
            for chunk in response["Body"].iter_chunks(chunk_size=self.chunk_size):
                on_chunk(chunk)
        except ClientError as e:
            if _is_not_found(e):
                raise NotFoundError(key) from e
            logger.error(
                "Failed to download object",
                extra={"bucket": self.bucket, "key": key, "error": str(e)}
            )
            raise TransportError(f"Download failed: {e}") from e
        except BotoCoreError as e:
            logger.error(
                "Failed to download object",
                extra={"bucket": self.bucket, "key": key, "error": str(e)}
            )
            raise TransportError(f"Download failed: {e}") from e

        return _response_headers(response)

    def delete_object(self, key: str) -> None:
        try:
            self._s3_client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                raise NotFoundError(key) from e
            raise DeleteError(f"Delete failed: {e}") from e
        except BotoCoreError as e:
            raise DeleteError(f"Delete failed: {e}") from e

    def object_url(self, key: str, sign: bool = True, expires_in: int = DEFAULT_URL_EXPIRY_SECONDS) -> str:
        if not sign:
            return f"{self.host}/{quote(key)}"

        try:
            return self._s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"bucket": self.bucket, "key": key, "error": str(e)}
            )
            raise TransportError(f"Presigned URL generation failed: {e}") from e


# ---------------------------------------------------------------------------
# Mock Bucket for Local Development
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _MockObject:
    data: bytes
    content_type: str
    created_at: float


# {bucket: {key: object}}, shared by every mock client in the process
_mock_buckets: dict[str, dict[str, _MockObject]] = {}
_mock_lock = threading.Lock()


def reset_mock_buckets() -> None:
    """Drop every object held by mock clients."""
    with _mock_lock:
        _mock_buckets.clear()


class MockBucketClient:
    """
    In-memory bucket for local development and tests.

    All mock clients for the same bucket name share their objects, the
    same way a public and an internal client see one real bucket.
    Signed URLs use the mock:// scheme and carry an Expires timestamp.
    """

    def __init__(self, credentials: Credentials, internal: bool = False) -> None:
        self.bucket = credentials.bucket
        self.endpoint = credentials.endpoint(internal)
        self.internal = internal
        with _mock_lock:
            self._objects = _mock_buckets.setdefault(self.bucket, {})
        logger.info(
            "Initialized mock bucket client (in-memory)",
            extra={"bucket": self.bucket, "internal": internal}
        )

    def put_object(self, key: str, local_path: Union[str, Path], content_type: str) -> None:
        try:
            data = Path(local_path).read_bytes()
        except OSError as e:
            raise UploadError(f"Cannot read {local_path}: {e}") from e

        with _mock_lock:
            self._objects[key] = _MockObject(data=data, content_type=content_type, created_at=time.time())

        logger.debug(
            "Stored object in mock bucket",
            extra={"bucket": self.bucket, "key": key, "size_bytes": len(data)}
        )

    def get_object(self, key: str, on_chunk: ChunkHandler) -> dict[str, str]:
        with _mock_lock:
            stored = self._objects.get(key)
        if stored is None:
            raise NotFoundError(key)

        on_chunk(stored.data)
        return {
            "content-type": stored.content_type,
            "content-length": str(len(stored.data)),
        }

    def delete_object(self, key: str) -> None:
        with _mock_lock:
            if key not in self._objects:
                raise NotFoundError(key)
            del self._objects[key]

    def object_url(self, key: str, sign: bool = True, expires_in: int = DEFAULT_URL_EXPIRY_SECONDS) -> str:
        url = f"mock://{self.bucket}/{quote(key)}"
        if not sign:
            return url
        expires_at = int(time.time()) + expires_in
        return f"{url}?Expires={expires_at}&Signature=mock"


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_bucket_client(
    credentials: Credentials,
    internal: bool = False,
    mock_mode: bool = False,
) -> BucketClient:
    """
    Create a bucket client for the public or internal endpoint.

    Args:
        credentials: Bucket, region and access keys
        internal: Use the datacenter-internal endpoint
        mock_mode: Return an in-memory client instead of a boto3 one

    Returns:
        BucketClient implementation (boto3 or mock)
    """
    if mock_mode:
        return MockBucketClient(credentials, internal=internal)

    if not credentials.bucket:
        raise ConfigurationError("A bucket name is required when not in mock mode")

    return OssBucketClient(credentials, internal=internal)


__all__ = [
    "BucketClient",
    "ChunkHandler",
    "MockBucketClient",
    "OssBucketClient",
    "create_bucket_client",
    "reset_mock_buckets",
]
