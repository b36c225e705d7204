"""
Tests for the ObjectStore protocol and types.
"""

import tempfile
from datetime import UTC, datetime

import pytest

from bucketfs.storage.filesystem import FilesystemStore
from bucketfs.storage.protocol import (
    ObjectMeta,
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
    ObjectStorePermissionError,
)
from bucketfs.storage.s3 import S3Store


class TestObjectMeta:
    def test_creation(self) -> None:
        meta = ObjectMeta(
            key="pages/index.js",
            size_bytes=100,
            content_type="text/javascript",
            etag="abc123",
            last_modified=datetime.now(UTC),
        )
        assert meta.key == "pages/index.js"
        assert meta.size_bytes == 100

    def test_frozen(self) -> None:
        meta = ObjectMeta(
            key="pages/index.js",
            size_bytes=100,
            content_type="text/javascript",
            etag="abc123",
            last_modified=datetime.now(UTC),
        )
        with pytest.raises(AttributeError):
            meta.key = "other"  # type: ignore[misc]


class TestExceptions:
    def test_object_not_found_error(self) -> None:
        err = ObjectNotFoundError("my/key")
        assert err.key == "my/key"
        assert "my/key" in str(err)
        assert isinstance(err, ObjectStoreError)

    def test_permission_error(self) -> None:
        err = ObjectStorePermissionError("access denied")
        assert isinstance(err, ObjectStoreError)


class TestProtocolCompliance:
    def test_filesystem_store_satisfies_protocol(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = FilesystemStore(root_dir=tmpdir)
            assert isinstance(store, ObjectStore)

    def test_s3_store_satisfies_protocol(self) -> None:
        store = S3Store(bucket="test-bucket")
        assert isinstance(store, ObjectStore)
