"""
URL building for stored objects.

Public URLs are plain string formatting against the configured host.
Signed URLs are delegated to a bucket client; the signature algorithm
belongs to botocore, not to us.
"""

from typing import Optional, Protocol
from urllib.parse import quote

from .errors import ConfigurationError
from .models import DEFAULT_URL_EXPIRY_SECONDS, KEY_SEPARATOR, UrlPolicy, normalize_key

# RFC 3986 path characters that may appear unescaped in a key
_SAFE_PATH_CHARS = "/-_.~!$&'()*+,;=:@"


class UrlSigner(Protocol):
    """Anything that can produce a time-limited URL for a key."""

    def object_url(self, key: str, sign: bool = True, expires_in: int = DEFAULT_URL_EXPIRY_SECONDS) -> str:
        ...


def validate_host(host: str) -> str:
    """
    Check that a host can prefix absolute URLs.

    Raises ConfigurationError when the scheme separator is missing.
    Returns the host without trailing separators.
    """
    if "://" not in host:
        raise ConfigurationError(
            f"Storage host must include a scheme such as http:// or https://, got: {host!r}"
        )
    return host.rstrip(KEY_SEPARATOR)


class UrlBuilder:
    """
    Builds public and signed URLs for keys in one bucket.

    The policy is fixed at construction: a private bucket always hands
    out signed URLs, a public one always hands out plain URLs.
    """

    def __init__(
        self,
        host: str,
        policy: UrlPolicy = UrlPolicy.PUBLIC,
        signer: Optional[UrlSigner] = None,
        expires_in: int = DEFAULT_URL_EXPIRY_SECONDS,
    ) -> None:
        self.host = validate_host(host)
        self.policy = policy
        self.expires_in = expires_in
        self._signer = signer

    def public_url(self, key: str) -> str:
        return KEY_SEPARATOR.join([self.host, quote(normalize_key(key), safe=_SAFE_PATH_CHARS)])

    def signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        if self._signer is None:
            raise ConfigurationError("Signed URLs need a bucket client to sign with")
        if expires_in is None:
            expires_in = self.expires_in
        return self._signer.object_url(normalize_key(key), sign=True, expires_in=expires_in)

    def url(self, key: str) -> str:
        if self.policy is UrlPolicy.SIGNED:
            return self.signed_url(key)
        return self.public_url(key)
