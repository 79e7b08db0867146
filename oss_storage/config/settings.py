"""
Storage configuration using Pydantic settings.

Configuration is loaded from environment variables (or a .env file) with
sensible defaults. Mock mode enables local development without a bucket.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.models import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_DOMAIN,
    DEFAULT_REGION,
    DEFAULT_URL_EXPIRY_SECONDS,
    Credentials,
)


class Settings(BaseSettings):
    """
    Storage settings loaded from environment variables.

    Every field maps to an upper-case variable, e.g. OSS_BUCKET.
    """

    # Credentials
    oss_access_id: str = Field(
        default="",
        description="Access key ID for the bucket. Required unless in mock mode."
    )
    oss_access_secret: str = Field(
        default="",
        description="Access key secret for the bucket. Required unless in mock mode."
    )
    oss_bucket: str = Field(
        default="",
        description="Bucket name"
    )

    # Endpoints
    oss_region: str = Field(
        default=DEFAULT_REGION,
        description="Bucket region, used in the endpoint name (oss-{region}.{domain})"
    )
    oss_domain: str = Field(
        default=DEFAULT_DOMAIN,
        description="Endpoint domain"
    )
    oss_endpoint_scheme: str = Field(
        default="https",
        description="Scheme used when talking to the endpoint"
    )
    oss_host: Optional[str] = Field(
        default=None,
        description="Base URL for public file URLs, e.g. a CDN. Derived from bucket and region if not provided."
    )
    oss_internal: bool = Field(
        default=False,
        description="Upload and download through the internal endpoint. Only reachable from the same region."
    )

    # Access
    oss_private_read: bool = Field(
        default=False,
        description="Bucket is private; hand out signed URLs instead of public ones."
    )
    oss_url_expiry_seconds: int = Field(
        default=DEFAULT_URL_EXPIRY_SECONDS,
        gt=0,
        description="Lifetime of signed URLs in seconds"
    )

    # Uploads
    oss_store_dir: str = Field(
        default="uploads",
        description="Key prefix for stored files"
    )
    oss_default_content_type: str = Field(
        default=DEFAULT_CONTENT_TYPE,
        description="Content type for files that don't carry one"
    )
    oss_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory bucket instead of OSS. Enables local dev without credentials."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def to_credentials(self) -> Credentials:
        return Credentials(
            access_id=self.oss_access_id,
            access_secret=self.oss_access_secret,
            bucket=self.oss_bucket,
            region=self.oss_region,
            host_template=self.oss_host or None,
            private_read=self.oss_private_read,
            use_internal_endpoint=self.oss_internal,
            domain=self.oss_domain,
            endpoint_scheme=self.oss_endpoint_scheme,
        )

    def validate_required_fields(self) -> list[str]:
        """
        Return the names of required variables that are missing.

        Credentials are only required outside mock mode. The bucket name
        is always required since it appears in the default host.
        """
        missing = []

        if not self.oss_bucket:
            missing.append("OSS_BUCKET")

        if not self.oss_mock_mode:
            if not self.oss_access_id:
                missing.append("OSS_ACCESS_ID")
            if not self.oss_access_secret:
                missing.append("OSS_ACCESS_SECRET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once per process. Tests can call
    get_settings.cache_clear() to reload them.
    """
    return Settings()
