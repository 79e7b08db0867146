"""Shared fixtures for storage tests."""

import pytest

from oss_storage.config.settings import get_settings
from oss_storage.core.models import Credentials
from oss_storage.infrastructure.oss.client import reset_mock_buckets


@pytest.fixture(autouse=True)
def clean_state():
    """Each test starts with empty mock buckets and fresh settings."""
    reset_mock_buckets()
    get_settings.cache_clear()
    yield
    reset_mock_buckets()
    get_settings.cache_clear()


@pytest.fixture
def credentials() -> Credentials:
    """Public bucket in the default region."""
    return Credentials(
        access_id="test-access-id",
        access_secret="test-access-secret",
        bucket="assets",
        region="cn-hangzhou",
    )


@pytest.fixture
def png_file(tmp_path):
    """A small file on disk to upload."""
    path = tmp_path / "b.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-image-bytes")
    return path
