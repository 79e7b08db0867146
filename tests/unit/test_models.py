"""
Unit tests for the storage value objects.

These run without boto3 clients or a bucket.
"""

from pathlib import Path

import pytest

from oss_storage.core.models import (
    Credentials,
    DeleteOutcome,
    DeleteResult,
    LocalFile,
    UrlPolicy,
    normalize_key,
)


# ---------------------------------------------------------------------------
# Key Normalization Tests
# ---------------------------------------------------------------------------

class TestNormalizeKey:
    """Tests for turning uploader paths into bucket keys."""

    @pytest.mark.parametrize("key", ["a/b.png", "/a/b.png", "//a/b.png", "b.png", ""])
    def test_normalization_is_idempotent(self, key):
        """Normalizing twice gives the same key as normalizing once."""
        assert normalize_key(normalize_key(key)) == normalize_key(key)

    @pytest.mark.parametrize("key", ["/a/b.png", "/uploads/avatar.jpg", "/x"])
    def test_leading_separator_does_not_change_key(self, key):
        """A key with a leading separator names the same object without it."""
        assert normalize_key(key) == normalize_key(key[1:])

    def test_strips_only_leading_separators(self):
        """Inner and trailing separators are part of the key."""
        assert normalize_key("/a//b/") == "a//b/"


# ---------------------------------------------------------------------------
# Credentials Tests
# ---------------------------------------------------------------------------

class TestCredentials:
    """Tests for endpoint and host derivation."""

    def test_default_host_is_derived_from_bucket_and_region(self, credentials):
        assert credentials.host == "http://assets.oss-cn-hangzhou.aliyuncs.com"

    def test_configured_host_wins(self):
        creds = Credentials("id", "secret", "assets", host_template="https://cdn.example.com")
        assert creds.host == "https://cdn.example.com"

    def test_default_region(self):
        creds = Credentials("id", "secret", "assets")
        assert creds.region == "cn-hangzhou"

    def test_public_and_internal_endpoints(self, credentials):
        assert credentials.endpoint(internal=False) == "oss-cn-hangzhou.aliyuncs.com"
        assert credentials.endpoint(internal=True) == "oss-cn-hangzhou-internal.aliyuncs.com"

    def test_endpoint_url_uses_scheme(self):
        creds = Credentials("id", "secret", "assets", region="cn-beijing", endpoint_scheme="http")
        assert creds.endpoint_url(internal=True) == "http://oss-cn-beijing-internal.aliyuncs.com"

    def test_credentials_are_immutable(self, credentials):
        with pytest.raises(AttributeError):
            credentials.bucket = "other"


# ---------------------------------------------------------------------------
# LocalFile Tests
# ---------------------------------------------------------------------------

class TestLocalFile:
    """Tests for describing files to upload."""

    def test_guesses_content_type_from_filename(self, png_file):
        local = LocalFile.from_path(png_file)

        assert local.filename == "b.png"
        assert local.content_type == "image/png"
        assert local.path == Path(png_file)

    def test_explicit_content_type_is_kept(self, png_file):
        local = LocalFile.from_path(png_file, content_type="application/octet-stream")
        assert local.content_type == "application/octet-stream"

    def test_unknown_extension_leaves_content_type_unset(self, tmp_path):
        path = tmp_path / "data.unknownext"
        path.write_bytes(b"x")

        assert LocalFile.from_path(path).content_type is None

    def test_filename_override(self, png_file):
        local = LocalFile.from_path(png_file, filename="avatar.jpg")

        assert local.filename == "avatar.jpg"
        assert local.content_type == "image/jpeg"

    def test_size_reads_from_disk(self, png_file):
        assert LocalFile.from_path(png_file).size == png_file.stat().st_size


# ---------------------------------------------------------------------------
# Policy and Result Tests
# ---------------------------------------------------------------------------

class TestUrlPolicy:
    def test_private_read_selects_signed_urls(self):
        creds = Credentials("id", "secret", "assets", private_read=True)
        assert UrlPolicy.for_credentials(creds) is UrlPolicy.SIGNED

    def test_public_read_selects_public_urls(self, credentials):
        assert UrlPolicy.for_credentials(credentials) is UrlPolicy.PUBLIC


class TestDeleteResult:
    """Only a real delete counts as success."""

    def test_deleted_is_truthy(self):
        result = DeleteResult(key="a.png", outcome=DeleteOutcome.DELETED)
        assert result
        assert result.deleted

    def test_not_found_is_falsy(self):
        result = DeleteResult(key="a.png", outcome=DeleteOutcome.NOT_FOUND)
        assert not result
        assert result.not_found

    def test_failed_keeps_error(self):
        result = DeleteResult(key="a.png", outcome=DeleteOutcome.FAILED, error="AccessDenied")
        assert not result
        assert result.error == "AccessDenied"
