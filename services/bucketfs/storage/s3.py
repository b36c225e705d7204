"""
S3 object store client for bucketfs.

Uses aioboto3 for async I/O. A single client (and its connection pool) is
opened on first use and shared by every call until close(). Credentials are
taken from configuration when given, otherwise from the SDK credential chain.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, NoReturn

import aioboto3
from botocore.config import Config as BotocoreConfig
from botocore.exceptions import BotoCoreError, ClientError

from bucketfs.logging_config import get_logger
from bucketfs.storage.protocol import (
    DEFAULT_CONTENT_TYPE,
    ObjectMeta,
    ObjectNotFoundError,
    ObjectStoreError,
    ObjectStorePermissionError,
)

logger = get_logger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
_ACCESS_DENIED_CODES = frozenset({"403", "AccessDenied", "Forbidden"})


def _raise_translated(key: str, e: Exception) -> NoReturn:
    """Re-raise a botocore failure as the matching ObjectStoreError."""
    if isinstance(e, ClientError):
        error_code = str(e.response.get("Error", {}).get("Code", ""))
        if error_code in _NOT_FOUND_CODES:
            raise ObjectNotFoundError(key) from e
        if error_code in _ACCESS_DENIED_CODES:
            raise ObjectStorePermissionError(str(e)) from e
    raise ObjectStoreError(str(e)) from e


class S3Store:
    """Object store backed by an S3-compatible bucket."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        prefix: str = "",
        endpoint_url: str = "",
        access_key_id: str = "",
        secret_access_key: str = "",
        force_path_style: bool = False,
    ) -> None:
        if not bucket:
            raise ValueError("S3Store requires a bucket name")

        self._bucket = bucket
        self._region = region
        self._prefix = prefix.strip("/")
        self._endpoint_url = endpoint_url or None
        self._force_path_style = force_path_style

        if access_key_id and secret_access_key:
            self._session = aioboto3.Session(
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                region_name=region,
            )
        else:
            if access_key_id or secret_access_key:
                logger.warning(
                    "Incomplete credential pair, falling back to SDK credential chain",
                    bucket=bucket,
                )
            self._session = aioboto3.Session(region_name=region)

        self._client: Any = None

    @property
    def bucket(self) -> str:
        return self._bucket

    def _full_key(self, key: str) -> str:
        """Prepend the configured prefix to a key."""
        if self._prefix:
            return f"{self._prefix}/{key}"
        return key

    def _strip_prefix(self, full_key: str) -> str:
        """Remove the configured prefix from a full key."""
        if self._prefix and full_key.startswith(self._prefix + "/"):
            return full_key[len(self._prefix) + 1 :]
        return full_key

    async def _get_client(self) -> Any:
        if self._client is None:
            client_config = None
            if self._force_path_style:
                client_config = BotocoreConfig(s3={"addressing_style": "path"})
            self._client = await self._session.client(
                "s3",
                region_name=self._region,
                endpoint_url=self._endpoint_url,
                config=client_config,
            ).__aenter__()
            logger.info(
                "S3 client initialized",
                bucket=self._bucket,
                region=self._region,
                endpoint_url=self._endpoint_url,
            )
        return self._client

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> ObjectMeta:
        client = await self._get_client()

        try:
            response = await client.put_object(
                Bucket=self._bucket,
                Key=self._full_key(key),
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            _raise_translated(key, e)

        return ObjectMeta(
            key=key,
            size_bytes=len(data),
            content_type=content_type,
            etag=response.get("ETag", "").strip('"'),
            last_modified=datetime.now(UTC),
        )

    async def get(self, key: str) -> bytes:
        client = await self._get_client()

        try:
            response = await client.get_object(Bucket=self._bucket, Key=self._full_key(key))
            return await response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            _raise_translated(key, e)

    async def delete(self, key: str) -> None:
        client = await self._get_client()

        try:
            await client.delete_object(Bucket=self._bucket, Key=self._full_key(key))
        except (ClientError, BotoCoreError) as e:
            _raise_translated(key, e)

    async def exists(self, key: str) -> bool:
        try:
            await self.head(key)
        except ObjectNotFoundError:
            return False
        return True

    async def head(self, key: str) -> ObjectMeta:
        client = await self._get_client()

        try:
            response = await client.head_object(Bucket=self._bucket, Key=self._full_key(key))
        except (ClientError, BotoCoreError) as e:
            _raise_translated(key, e)

        return ObjectMeta(
            key=key,
            size_bytes=response.get("ContentLength", 0),
            content_type=response.get("ContentType", DEFAULT_CONTENT_TYPE),
            etag=response.get("ETag", "").strip('"'),
            last_modified=response.get("LastModified", datetime.now(UTC)),
        )

    async def list_prefix(self, prefix: str) -> list[ObjectMeta]:
        client = await self._get_client()
        full_prefix = self._full_key(prefix)
        results: list[ObjectMeta] = []

        paginator = client.get_paginator("list_objects_v2")
        try:
            async for page in paginator.paginate(Bucket=self._bucket, Prefix=full_prefix):
                for obj in page.get("Contents", []):
                    results.append(
                        ObjectMeta(
                            key=self._strip_prefix(obj["Key"]),
                            size_bytes=obj.get("Size", 0),
                            content_type=DEFAULT_CONTENT_TYPE,
                            etag=obj.get("ETag", "").strip('"'),
                            last_modified=obj.get("LastModified", datetime.now(UTC)),
                        )
                    )
        except (ClientError, BotoCoreError) as e:
            _raise_translated(prefix, e)

        return results

    async def close(self) -> None:
        if self._client is not None:
            await self._client.__aexit__(None, None, None)
            self._client = None
            logger.info("S3 client closed", bucket=self._bucket)
