"""
bucketfs: filesystem-style file operations backed by an object store bucket.

A process normally builds one BucketFS at startup with init_fs(), hands it
out with get_fs() and closes it with close_fs() at shutdown. BucketFS can
also be constructed directly around any ObjectStore, which is what tests do.
"""

from __future__ import annotations

from bucketfs.config import Settings, StorageBackend, settings
from bucketfs.errors import ErrorKind, FilesystemError, InvalidPathError, RenameError, RenameStep
from bucketfs.fs import BucketFS
from bucketfs.logging_config import configure_logging, get_logger
from bucketfs.metadata import StatResult
from bucketfs.storage import create_store

__all__ = [
    "BucketFS",
    "ErrorKind",
    "FilesystemError",
    "InvalidPathError",
    "RenameError",
    "RenameStep",
    "StatResult",
    "close_fs",
    "get_fs",
    "init_fs",
]

logger = get_logger(__name__)

# Module-level instance
_fs: BucketFS | None = None


def _bucket_label(cfg: Settings) -> str:
    if cfg.storage.backend == StorageBackend.S3:
        return cfg.storage.s3.bucket
    return cfg.storage.filesystem.root_dir


async def init_fs(cfg: Settings | None = None, *, setup_logging: bool = False) -> BucketFS:
    """Create the process-wide BucketFS from configuration.

    With ``setup_logging`` the root logger is configured from the same
    settings; leave it off when the host application owns logging.

    Raises RuntimeError if it already exists; the store is never recreated
    implicitly.
    """
    global _fs  # noqa: PLW0603
    if _fs is not None:
        raise RuntimeError("bucketfs already initialized, call close_fs() first")

    cfg = cfg or settings
    if setup_logging:
        configure_logging(json_logs=cfg.json_logs, log_level=cfg.log_level, debug=cfg.debug)

    _fs = BucketFS(
        create_store(cfg.storage),
        default_encoding=cfg.default_encoding,
        name=_bucket_label(cfg),
    )
    logger.info("bucketfs initialized", backend=str(cfg.storage.backend), bucket=_fs.name)
    return _fs


async def close_fs() -> None:
    """Close the process-wide BucketFS and its store."""
    global _fs  # noqa: PLW0603
    if _fs is not None:
        await _fs.close()
        _fs = None
        logger.info("bucketfs closed")


def get_fs() -> BucketFS:
    """Return the process-wide BucketFS.

    Raises RuntimeError if init_fs() has not been called.
    """
    if _fs is None:
        raise RuntimeError("bucketfs not initialized, call init_fs() first")
    return _fs
