"""
Tests for the S3 object store client.

Unit tests use a mocked aioboto3 client. Integration tests require
LocalStack; set LOCALSTACK_ENDPOINT to enable them.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from bucketfs.storage.protocol import (
    ObjectNotFoundError,
    ObjectStoreError,
    ObjectStorePermissionError,
)
from bucketfs.storage.s3 import S3Store


def _client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


async def _pages(*pages: dict) -> AsyncIterator[dict]:
    for page in pages:
        yield page


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.put_object = AsyncMock(return_value={"ETag": '"etag-1"'})
    client.delete_object = AsyncMock(return_value={})
    client.head_object = AsyncMock(
        return_value={
            "ContentLength": 42,
            "ContentType": "application/json",
            "ETag": '"etag-2"',
            "LastModified": datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
        }
    )
    body = MagicMock()
    body.read = AsyncMock(return_value=b"bundle bytes")
    client.get_object = AsyncMock(return_value={"Body": body})
    return client


@pytest.fixture
def store(client: MagicMock) -> S3Store:
    store = S3Store(bucket="test-bucket", prefix="site")
    store._client = client
    return store


class TestS3StoreKeys:
    def test_requires_bucket(self) -> None:
        with pytest.raises(ValueError):
            S3Store(bucket="")

    def test_full_key_with_prefix(self) -> None:
        store = S3Store(bucket="test-bucket", prefix="/site/")
        assert store._full_key("pages/index.js") == "site/pages/index.js"

    def test_full_key_without_prefix(self) -> None:
        store = S3Store(bucket="test-bucket")
        assert store._full_key("pages/index.js") == "pages/index.js"

    def test_strip_prefix(self, store: S3Store) -> None:
        assert store._strip_prefix("site/pages/index.js") == "pages/index.js"

    def test_strip_prefix_no_match(self, store: S3Store) -> None:
        assert store._strip_prefix("other/key") == "other/key"


class TestS3StoreClient:
    def test_explicit_credentials(self) -> None:
        with patch("bucketfs.storage.s3.aioboto3.Session") as session_cls:
            S3Store(
                bucket="test",
                region="eu-west-1",
                access_key_id="AKIA",
                secret_access_key="secret",
            )
        session_cls.assert_called_once_with(
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
            region_name="eu-west-1",
        )

    def test_incomplete_credentials_warns(self) -> None:
        with patch("bucketfs.storage.s3.logger") as mock_logger:
            S3Store(bucket="test", access_key_id="AKIA")
            mock_logger.warning.assert_called_once()

    async def test_client_created_once_with_path_style(self, client: MagicMock) -> None:
        store = S3Store(
            bucket="test",
            endpoint_url="http://localhost:4566",
            force_path_style=True,
        )
        session = MagicMock()
        session.client.return_value.__aenter__ = AsyncMock(return_value=client)
        store._session = session

        first = await store._get_client()
        second = await store._get_client()

        assert first is second is client
        session.client.assert_called_once()
        kwargs = session.client.call_args.kwargs
        assert kwargs["endpoint_url"] == "http://localhost:4566"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    async def test_close_releases_client(self, store: S3Store, client: MagicMock) -> None:
        client.__aexit__ = AsyncMock(return_value=None)
        await store.close()
        client.__aexit__.assert_awaited_once()
        assert store._client is None

        await store.close()  # second close is a no-op
        client.__aexit__.assert_awaited_once()


class TestS3StoreOperations:
    async def test_put(self, store: S3Store, client: MagicMock) -> None:
        meta = await store.put("pages/a.js", b"abc", content_type="text/javascript")
        client.put_object.assert_awaited_once_with(
            Bucket="test-bucket",
            Key="site/pages/a.js",
            Body=b"abc",
            ContentType="text/javascript",
        )
        assert meta.key == "pages/a.js"
        assert meta.size_bytes == 3
        assert meta.etag == "etag-1"

    async def test_get(self, store: S3Store, client: MagicMock) -> None:
        assert await store.get("pages/a.js") == b"bundle bytes"
        client.get_object.assert_awaited_once_with(Bucket="test-bucket", Key="site/pages/a.js")

    async def test_head_translates_metadata(self, store: S3Store) -> None:
        meta = await store.head("manifest.json")
        assert meta.key == "manifest.json"
        assert meta.size_bytes == 42
        assert meta.content_type == "application/json"
        assert meta.etag == "etag-2"
        assert meta.last_modified == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    async def test_exists(self, store: S3Store, client: MagicMock) -> None:
        assert await store.exists("manifest.json")
        client.head_object.side_effect = _client_error("404", "HeadObject")
        assert not await store.exists("manifest.json")

    async def test_exists_raises_on_other_errors(self, store: S3Store, client: MagicMock) -> None:
        client.head_object.side_effect = _client_error("InternalError", "HeadObject")
        with pytest.raises(ObjectStoreError):
            await store.exists("manifest.json")

    async def test_list_prefix_follows_pages(self, store: S3Store, client: MagicMock) -> None:
        paginator = MagicMock()
        paginator.paginate.return_value = _pages(
            {"Contents": [{"Key": "site/a.js", "Size": 1, "ETag": '"1"'}]},
            {"Contents": [{"Key": "site/b/c.js", "Size": 2, "ETag": '"2"'}]},
            {},
        )
        client.get_paginator.return_value = paginator

        results = await store.list_prefix("")

        paginator.paginate.assert_called_once_with(Bucket="test-bucket", Prefix="site/")
        assert [m.key for m in results] == ["a.js", "b/c.js"]
        assert [m.size_bytes for m in results] == [1, 2]


class TestS3StoreErrorTranslation:
    async def test_get_missing(self, store: S3Store, client: MagicMock) -> None:
        client.get_object.side_effect = _client_error("NoSuchKey")
        with pytest.raises(ObjectNotFoundError) as exc_info:
            await store.get("missing.js")
        assert exc_info.value.key == "missing.js"

    async def test_head_missing(self, store: S3Store, client: MagicMock) -> None:
        client.head_object.side_effect = _client_error("404", "HeadObject")
        with pytest.raises(ObjectNotFoundError):
            await store.head("missing.js")

    async def test_put_denied(self, store: S3Store, client: MagicMock) -> None:
        client.put_object.side_effect = _client_error("AccessDenied", "PutObject")
        with pytest.raises(ObjectStorePermissionError):
            await store.put("a.js", b"a")

    async def test_delete_server_error(self, store: S3Store, client: MagicMock) -> None:
        client.delete_object.side_effect = _client_error("InternalError", "DeleteObject")
        with pytest.raises(ObjectStoreError) as exc_info:
            await store.delete("a.js")
        assert not isinstance(exc_info.value, ObjectNotFoundError)

    async def test_connection_error(self, store: S3Store, client: MagicMock) -> None:
        client.get_object.side_effect = EndpointConnectionError(endpoint_url="http://nowhere")
        with pytest.raises(ObjectStoreError):
            await store.get("a.js")


class TestS3StoreIntegration:
    """Integration tests using LocalStack. Skipped unless LOCALSTACK_ENDPOINT is set."""

    @pytest.fixture
    async def store(
        self, localstack_available: bool, localstack_endpoint: str, s3_test_bucket: str
    ) -> S3Store:
        if not localstack_available:
            pytest.skip("LocalStack not available")
        store = S3Store(
            bucket=s3_test_bucket,
            region="us-east-1",
            endpoint_url=localstack_endpoint,
            access_key_id="test",
            secret_access_key="test",
            force_path_style=True,
        )
        client = await store._get_client()
        try:
            await client.create_bucket(Bucket=s3_test_bucket)
        except ClientError:
            pass  # Bucket may already exist
        return store

    async def test_put_get_roundtrip(self, store: S3Store) -> None:
        data = b"s3 integration test data"
        meta = await store.put("integration/test.txt", data, content_type="text/plain")
        assert meta.size_bytes == len(data)
        assert await store.get("integration/test.txt") == data
        await store.close()

    async def test_delete_and_exists(self, store: S3Store) -> None:
        await store.put("integration/to-delete.txt", b"data")
        assert await store.exists("integration/to-delete.txt")

        await store.delete("integration/to-delete.txt")
        await store.delete("integration/to-delete.txt")
        assert not await store.exists("integration/to-delete.txt")
        await store.close()

    async def test_head(self, store: S3Store) -> None:
        await store.put("integration/head-test.txt", b"head data", content_type="text/plain")
        meta = await store.head("integration/head-test.txt")
        assert meta.size_bytes == 9
        assert meta.content_type == "text/plain"
        await store.close()

    async def test_list_prefix(self, store: S3Store) -> None:
        await store.put("integration/list/a.txt", b"a")
        await store.put("integration/list/b.txt", b"b")
        await store.put("integration/other/c.txt", b"c")

        keys = {m.key for m in await store.list_prefix("integration/list/")}
        assert keys == {"integration/list/a.txt", "integration/list/b.txt"}
        await store.close()
