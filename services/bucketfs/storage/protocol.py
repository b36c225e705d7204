"""
Object store protocol and types for bucketfs.

Defines the ObjectStore Protocol every backend satisfies, the metadata
record it returns, and the exceptions it raises. Backends perform exactly one
round trip per call and never retry.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# --- Data Types ---


@dataclass(frozen=True)
class ObjectMeta:
    """Metadata about a stored object."""

    key: str
    size_bytes: int
    content_type: str
    etag: str
    last_modified: datetime


# --- Exceptions ---


class ObjectStoreError(Exception):
    """Base exception for object store operations (transport, auth, server side)."""


class ObjectNotFoundError(ObjectStoreError):
    """Raised when a requested object does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Object not found: {key}")


class ObjectStorePermissionError(ObjectStoreError):
    """Raised when the credentials lack permission for the operation."""


class InvalidKeyError(ObjectStoreError):
    """Raised when a backend cannot store an object under the given key."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Invalid key {key!r}: {reason}")


# --- Protocol ---


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol defining the object storage interface.

    All methods are async. Keys are opaque strings: a "/" inside a key does
    not imply any hierarchy.
    """

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> ObjectMeta:
        """Store an object, replacing any object already stored under ``key``.

        Returns:
            Metadata of the stored object.
        """
        ...

    async def get(self, key: str) -> bytes:
        """Retrieve an object's content.

        Raises:
            ObjectNotFoundError: If the object does not exist.
        """
        ...

    async def delete(self, key: str) -> None:
        """Delete an object.

        Idempotent: does not raise if the object does not exist.
        """
        ...

    async def exists(self, key: str) -> bool:
        """Return True if the object exists.

        Raises:
            ObjectStoreError: On any failure other than not-found.
        """
        ...

    async def head(self, key: str) -> ObjectMeta:
        """Get object metadata without downloading the content.

        Raises:
            ObjectNotFoundError: If the object does not exist.
        """
        ...

    async def list_prefix(self, prefix: str) -> list[ObjectMeta]:
        """List every object whose key starts with ``prefix``.

        An empty prefix lists the whole bucket. Pagination is followed to the
        end, so the result is always complete and finite.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the backend."""
        ...
