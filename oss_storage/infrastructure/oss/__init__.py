"""
OSS object storage integration.

Talks to the bucket through its S3-compatible API with boto3.
Includes mock mode for local development without credentials.
"""

from .client import (
    BucketClient,
    MockBucketClient,
    OssBucketClient,
    create_bucket_client,
    reset_mock_buckets,
)
from .connection import ClientFactory, Connection

__all__ = [
    "BucketClient",
    "ClientFactory",
    "Connection",
    "MockBucketClient",
    "OssBucketClient",
    "create_bucket_client",
    "reset_mock_buckets",
]
