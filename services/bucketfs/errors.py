"""
Failures raised by BucketFS operations.

Every operation raises FilesystemError (or a subclass) naming the operation
and the offending path. ``kind`` lets callers tell a missing object from a
denied or broken request without parsing messages.
"""

from __future__ import annotations

from enum import StrEnum

from bucketfs.storage.protocol import (
    InvalidKeyError,
    ObjectNotFoundError,
    ObjectStoreError,
    ObjectStorePermissionError,
)


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    TRANSPORT = "transport"
    INVALID_DATA = "invalid_data"
    INVALID_PATH = "invalid_path"
    PARTIAL = "partial"


class RenameStep(StrEnum):
    """The four store round trips a rename is made of, in order."""

    ACCESS = "access"
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class FilesystemError(Exception):
    """An operation did not complete."""

    def __init__(
        self,
        operation: str,
        path: str,
        kind: ErrorKind = ErrorKind.TRANSPORT,
        message: str | None = None,
    ) -> None:
        self.operation = operation
        self.path = path
        self.kind = kind
        super().__init__(message or f"Error in {operation}: {path}")

    @property
    def is_not_found(self) -> bool:
        return self.kind == ErrorKind.NOT_FOUND


class InvalidPathError(FilesystemError):
    """The path cannot be used as an object key."""

    def __init__(self, operation: str, path: str, reason: str) -> None:
        super().__init__(
            operation,
            path,
            kind=ErrorKind.INVALID_PATH,
            message=f"Invalid path for {operation}: {path!r} ({reason})",
        )


class RenameError(FilesystemError):
    """A rename stopped part way.

    Nothing is rolled back. When ``partial`` is set the new object was written
    but the old one could not be deleted, so both paths now exist. After any
    RenameError the state of both paths is uncertain and must be re-checked.
    """

    def __init__(
        self,
        old_path: str,
        new_path: str,
        step: RenameStep,
        kind: ErrorKind,
    ) -> None:
        self.old_path = old_path
        self.new_path = new_path
        self.step = step
        self.partial = step == RenameStep.DELETE
        if self.partial:
            kind = ErrorKind.PARTIAL
        super().__init__(
            "rename",
            old_path,
            kind=kind,
            message=f"Error renaming file from {old_path} to {new_path} (failed at {step})",
        )


def kind_of(exc: BaseException) -> ErrorKind:
    """Classify a store or filesystem failure."""
    if isinstance(exc, FilesystemError):
        return exc.kind
    if isinstance(exc, InvalidKeyError):
        return ErrorKind.INVALID_PATH
    if isinstance(exc, ObjectNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(exc, ObjectStorePermissionError):
        return ErrorKind.PERMISSION_DENIED
    return ErrorKind.TRANSPORT


def translate_store_error(
    operation: str, path: str, exc: ObjectStoreError, message: str
) -> FilesystemError:
    """Wrap a backend exception for the caller; use with ``raise ... from exc``."""
    return FilesystemError(operation, path, kind=kind_of(exc), message=message)
