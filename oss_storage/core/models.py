"""
Value objects shared by the storage layers.

These have no dependency on boto3 or the settings module, so a
Credentials instance can be built by hand in tests or by any host
application that keeps its configuration elsewhere.
"""

import mimetypes
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

DEFAULT_REGION = "cn-hangzhou"
DEFAULT_DOMAIN = "aliyuncs.com"
DEFAULT_CONTENT_TYPE = "image/jpg"
DEFAULT_URL_EXPIRY_SECONDS = 3600

KEY_SEPARATOR = "/"


def normalize_key(key: str) -> str:
    """
    Turn an uploader path into a bucket key.

    Object keys never start with a separator, so "/a/b.png", "//a/b.png"
    and "a/b.png" all name the same object.
    """
    return key.lstrip(KEY_SEPARATOR)


@dataclass(frozen=True)
class Credentials:
    """
    Everything needed to reach one bucket.

    host_template is the base for public URLs. When unset it is derived
    from bucket, region and domain, e.g.
    http://assets.oss-cn-hangzhou.aliyuncs.com
    """
    access_id: str
    access_secret: str
    bucket: str
    region: str = DEFAULT_REGION
    host_template: Optional[str] = None
    private_read: bool = False
    use_internal_endpoint: bool = False
    domain: str = DEFAULT_DOMAIN
    endpoint_scheme: str = "https"

    @property
    def host(self) -> str:
        if self.host_template:
            return self.host_template
        return f"http://{self.bucket}.oss-{self.region}.{self.domain}"

    def endpoint(self, internal: bool = False) -> str:
        """Endpoint host for the public or the datacenter-internal network."""
        if internal:
            return f"oss-{self.region}-internal.{self.domain}"
        return f"oss-{self.region}.{self.domain}"

    def endpoint_url(self, internal: bool = False) -> str:
        return f"{self.endpoint_scheme}://{self.endpoint(internal)}"


@dataclass(frozen=True)
class LocalFile:
    """A file on local disk waiting to be stored."""
    path: Path
    filename: str
    content_type: Optional[str] = None

    @classmethod
    def from_path(
        cls,
        path: Union[str, os.PathLike],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> "LocalFile":
        """
        Build a LocalFile, guessing the content type from the filename
        when none is given. Unknown extensions leave it unset so the
        uploader default applies.
        """
        path = Path(path)
        filename = filename or path.name
        if content_type is None:
            content_type, _ = mimetypes.guess_type(filename)
        return cls(path=path, filename=filename, content_type=content_type)

    @property
    def size(self) -> int:
        return self.path.stat().st_size


class UrlPolicy(Enum):
    """How URLs are handed out for stored files."""
    PUBLIC = "public"  # host + key, readable by anyone
    SIGNED = "signed"  # time-limited signature for private buckets

    @classmethod
    def for_credentials(cls, credentials: Credentials) -> "UrlPolicy":
        return cls.SIGNED if credentials.private_read else cls.PUBLIC


class DeleteOutcome(Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class DeleteResult:
    """
    Result of a delete request.

    Deletes never raise; the outcome says what happened. Only DELETED is
    truthy, so `if connection.delete(key):` reads naturally.
    """
    key: str
    outcome: DeleteOutcome
    error: Optional[str] = None

    @property
    def deleted(self) -> bool:
        return self.outcome is DeleteOutcome.DELETED

    @property
    def not_found(self) -> bool:
        return self.outcome is DeleteOutcome.NOT_FOUND

    def __bool__(self) -> bool:
        return self.deleted
