"""
Filesystem-shaped operations over a flat object store.

BucketFS maps each call onto one or more ObjectStore round trips and reports
failures as FilesystemError. It keeps no state besides the store handle and
takes no locks: concurrent calls on the same path race at the store, where
the last write wins.

Directory and permission calls (mkdir, rmdir, chmod) have nothing to act on
in a flat key space. They succeed without touching the store so code written
for a local filesystem can run its usual setup and teardown unchanged.
"""

from __future__ import annotations

import mimetypes
import os
from enum import Enum
from types import TracebackType
from typing import Self

from bucketfs.errors import (
    ErrorKind,
    FilesystemError,
    RenameError,
    RenameStep,
    kind_of,
    translate_store_error,
)
from bucketfs.logging_config import get_logger
from bucketfs.metadata import StatResult, stat_from_meta
from bucketfs.paths import key_to_name, path_to_key
from bucketfs.storage.protocol import (
    DEFAULT_CONTENT_TYPE,
    ObjectMeta,
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
)

logger = get_logger(__name__)

PathLike = str | os.PathLike[str]


class _Default(Enum):
    TOKEN = 0


_DEFAULT = _Default.TOKEN


def guess_content_type(key: str) -> str:
    content_type, _ = mimetypes.guess_type(key, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


class BucketFS:
    """File operations emulated on top of an ObjectStore.

    Args:
        store: Backend shared by every call; closed by close().
        default_encoding: Text encoding used when a call does not name one.
        name: Label for the bucket, used in listing errors and logs.
    """

    def __init__(
        self,
        store: ObjectStore,
        default_encoding: str = "utf-8",
        name: str = "",
    ) -> None:
        self._store = store
        self._default_encoding = default_encoding
        self._name = name or type(store).__name__

    @property
    def store(self) -> ObjectStore:
        return self._store

    @property
    def name(self) -> str:
        return self._name

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._store.close()

    # --- Reading and writing ---

    async def read_file(
        self,
        path: PathLike,
        encoding: str | None | _Default = _DEFAULT,
    ) -> str | bytes:
        """Return the content stored under ``path``.

        Decoded with ``encoding`` (the instance default when omitted);
        ``encoding=None`` returns the raw bytes.

        Raises:
            FilesystemError: "Error reading file"; ``kind`` is not_found when
                the object is absent and invalid_data when decoding fails.
        """
        key = path_to_key(path, "read_file")
        message = f"Error reading file: {key}"

        try:
            data = await self._store.get(key)
        except ObjectStoreError as e:
            logger.warning("Read failed", path=key, error=str(e))
            raise translate_store_error("read_file", key, e, message) from e

        if encoding is None:
            return data
        if encoding is _DEFAULT:
            encoding = self._default_encoding

        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning("Decode failed", path=key, encoding=encoding, error=str(e))
            raise FilesystemError(
                "read_file", key, kind=ErrorKind.INVALID_DATA, message=message
            ) from e

    async def write_file(
        self,
        path: PathLike,
        data: str | bytes,
        encoding: str | _Default = _DEFAULT,
        content_type: str | None = None,
    ) -> None:
        """Store ``data`` under ``path``, replacing whatever was there.

        Text is encoded with ``encoding``. The content type is guessed from
        the path when not given.
        """
        key = path_to_key(path, "write_file")
        message = f"Error writing file: {key}"

        if isinstance(data, str):
            if encoding is _DEFAULT:
                encoding = self._default_encoding
            try:
                body = data.encode(encoding)
            except (UnicodeEncodeError, LookupError) as e:
                raise FilesystemError(
                    "write_file", key, kind=ErrorKind.INVALID_DATA, message=message
                ) from e
        elif isinstance(data, bytes | bytearray | memoryview):
            body = bytes(data)
        else:
            raise FilesystemError(
                "write_file",
                key,
                kind=ErrorKind.INVALID_DATA,
                message=f"{message} (expected str or bytes, got {type(data).__name__})",
            )

        try:
            await self._store.put(key, body, content_type=content_type or guess_content_type(key))
        except ObjectStoreError as e:
            logger.warning("Write failed", path=key, error=str(e))
            raise translate_store_error("write_file", key, e, message) from e

        logger.info("Successfully wrote to file", path=key, size_bytes=len(body))

    async def unlink(self, path: PathLike) -> None:
        """Delete the object under ``path``. Deleting a missing path succeeds."""
        key = path_to_key(path, "unlink")

        try:
            await self._store.delete(key)
        except ObjectStoreError as e:
            logger.warning("Delete failed", path=key, error=str(e))
            raise translate_store_error(
                "unlink", key, e, f"Error deleting file: {key}"
            ) from e

        logger.info("Successfully deleted file", path=key)

    # --- Metadata ---

    async def _head(self, key: str, operation: str, message: str) -> ObjectMeta:
        try:
            return await self._store.head(key)
        except ObjectStoreError as e:
            logger.debug("Head failed", operation=operation, path=key, error=str(e))
            raise translate_store_error(operation, key, e, message) from e

    async def access(self, path: PathLike) -> None:
        """Succeed if the object exists and can be reached.

        Existence and permission are one check here: any failure, including a
        missing object, raises "No access to file".
        """
        key = path_to_key(path, "access")
        await self._head(key, "access", f"No access to file: {key}")
        logger.debug("Access to file is available", path=key)

    async def exists(self, path: PathLike) -> bool:
        """Return whether ``path`` exists; failures other than not-found raise."""
        key = path_to_key(path, "exists")
        try:
            return await self._store.exists(key)
        except ObjectNotFoundError:
            return False
        except ObjectStoreError as e:
            raise translate_store_error(
                "exists", key, e, f"Error checking file: {key}"
            ) from e

    async def stat(self, path: PathLike) -> StatResult:
        """Return size and modification time; fetched fresh on every call."""
        key = path_to_key(path, "stat")
        meta = await self._head(key, "stat", f"Error getting file info: {key}")
        return stat_from_meta(meta)

    async def readdir(self, prefix: str = "") -> list[str]:
        """List stored keys, in the order the store returns them.

        The default lists the entire bucket as a flat sequence. A prefix is
        matched as a plain string, so ``"pages"`` also matches ``"pages2/x"``.
        """
        try:
            entries = await self._store.list_prefix(prefix)
        except ObjectStoreError as e:
            logger.warning("List failed", bucket=self._name, prefix=prefix, error=str(e))
            raise translate_store_error(
                "readdir", prefix, e, f"Error reading directory: {prefix or self._name}"
            ) from e

        return [key_to_name(meta.key) for meta in entries]

    # --- Rename ---

    async def rename(self, old_path: PathLike, new_path: PathLike) -> None:
        """Move an object by copy then delete.

        Runs access, read, write and delete in that order with no rollback.
        A failure at any step raises RenameError naming the step. If the
        delete fails the new object has already been written and the old one
        is still there (``RenameError.partial``).
        Renaming a path onto itself only checks that it exists.
        """
        old_key = path_to_key(old_path, "rename")
        new_key = path_to_key(new_path, "rename")

        if old_key == new_key:
            # Same key: copying then deleting would destroy the object
            try:
                await self._head(old_key, "rename", f"No such source: {old_key}")
            except FilesystemError as e:
                raise RenameError(old_key, new_key, RenameStep.ACCESS, kind_of(e)) from e
            logger.debug("Rename to same path", path=old_key)
            return

        step = RenameStep.ACCESS
        try:
            meta = await self._head(old_key, "rename", f"No such source: {old_key}")

            step = RenameStep.READ
            data = await self.read_file(old_key, encoding=None)

            step = RenameStep.WRITE
            await self.write_file(new_key, data, content_type=meta.content_type)

            step = RenameStep.DELETE
            await self.unlink(old_key)
        except FilesystemError as e:
            logger.warning(
                "Rename failed",
                old_path=old_key,
                new_path=new_key,
                step=str(step),
                kind=str(e.kind),
            )
            raise RenameError(old_key, new_key, step, kind_of(e)) from e

        logger.info(
            "Successfully renamed file", old_path=old_key, new_path=new_key
        )

    # --- No-op directory and permission calls ---

    async def chmod(self, path: PathLike, mode: int | str) -> None:
        """Accept a permission change; objects carry no mode bits."""
        logger.debug("Changing mode of file", path=os.fspath(path), mode=mode)

    async def mkdir(self, path: PathLike, mode: int = 0o777, *, recursive: bool = False) -> None:
        """Accept a directory creation; keys need no parent."""
        logger.debug("Creating directory", path=os.fspath(path), recursive=recursive)

    async def rmdir(self, path: PathLike, *, recursive: bool = False) -> None:
        """Accept a directory removal; no object is touched."""
        logger.debug("Removing directory", path=os.fspath(path), recursive=recursive)
