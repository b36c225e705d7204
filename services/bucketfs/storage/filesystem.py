"""
Local directory object store for bucketfs.

Uses aiofiles for async I/O against a directory that plays the role of a
bucket. Intended for development and CI, where no S3 endpoint is running.

Keys map onto relative paths, so unlike a real bucket the keys ``a`` and
``a/b`` cannot both exist.
"""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from pathlib import Path

import aiofiles
import aiofiles.os

from bucketfs.logging_config import get_logger
from bucketfs.storage.protocol import (
    DEFAULT_CONTENT_TYPE,
    InvalidKeyError,
    ObjectMeta,
    ObjectNotFoundError,
    ObjectStoreError,
)

logger = get_logger(__name__)

_META_SUFFIX = ".meta"


class FilesystemStore:
    """Object store backed by the local filesystem."""

    def __init__(self, root_dir: str) -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)
        logger.info("Filesystem store initialized", root_dir=str(self._root))

    @property
    def root_dir(self) -> Path:
        """The directory standing in for the bucket."""
        return self._root

    def _full_path(self, key: str) -> Path:
        """Resolve key to a full filesystem path, preventing path traversal."""
        clean = Path(key)
        if not key or clean.is_absolute() or ".." in clean.parts:
            raise InvalidKeyError(key, "absolute or parent-relative path")
        return self._root / clean

    def _key_from_path(self, path: Path) -> str:
        return path.relative_to(self._root).as_posix()

    @staticmethod
    def _meta_path(path: Path) -> Path:
        return path.with_name(path.name + _META_SUFFIX)

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> ObjectMeta:
        path = self._full_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
            async with aiofiles.open(self._meta_path(path), "w") as f:
                await f.write(content_type)
            stat = await aiofiles.os.stat(path)
        except OSError as e:
            raise ObjectStoreError(f"Cannot write {key}: {e}") from e

        return ObjectMeta(
            key=key,
            size_bytes=len(data),
            content_type=content_type,
            etag=hashlib.md5(data).hexdigest(),  # noqa: S324
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
        )

    async def get(self, key: str) -> bytes:
        path = self._full_path(key)
        try:
            if not path.is_file():
                raise ObjectNotFoundError(key)
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(key) from e
        except OSError as e:
            raise ObjectStoreError(f"Cannot read {key}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._full_path(key)
        try:
            for target in (path, self._meta_path(path)):
                if target.is_file():
                    await aiofiles.os.remove(target)
        except FileNotFoundError:
            pass  # removed concurrently; delete is idempotent
        except OSError as e:
            raise ObjectStoreError(f"Cannot delete {key}: {e}") from e

    async def exists(self, key: str) -> bool:
        path = self._full_path(key)
        try:
            return path.is_file()
        except OSError as e:
            raise ObjectStoreError(f"Cannot check {key}: {e}") from e

    async def head(self, key: str) -> ObjectMeta:
        path = self._full_path(key)
        content_type = DEFAULT_CONTENT_TYPE
        meta_path = self._meta_path(path)

        try:
            if not path.is_file():
                raise ObjectNotFoundError(key)

            stat = await aiofiles.os.stat(path)

            if meta_path.exists():
                async with aiofiles.open(meta_path) as f:
                    content_type = (await f.read()).strip() or DEFAULT_CONTENT_TYPE

            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(key) from e
        except OSError as e:
            raise ObjectStoreError(f"Cannot stat {key}: {e}") from e

        return ObjectMeta(
            key=key,
            size_bytes=stat.st_size,
            content_type=content_type,
            etag=hashlib.md5(data).hexdigest(),  # noqa: S324
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
        )

    async def list_prefix(self, prefix: str) -> list[ObjectMeta]:
        results: list[ObjectMeta] = []
        try:
            paths = sorted(self._root.rglob("*"))
            keys = [
                self._key_from_path(path)
                for path in paths
                if path.is_file() and not path.name.endswith(_META_SUFFIX)
            ]
        except OSError as e:
            raise ObjectStoreError(f"Cannot list {self._root}: {e}") from e

        for key in keys:
            if key.startswith(prefix):
                results.append(await self.head(key))
        return results

    async def close(self) -> None:
        """No resources to release for filesystem backend."""
