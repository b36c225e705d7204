"""
Object store backends for bucketfs.

create_store() builds the backend named in the storage configuration. The
returned store owns its connection pool; callers share one instance and
close it once.
"""

from __future__ import annotations

from bucketfs.config import StorageBackend, StorageConfig
from bucketfs.logging_config import get_logger
from bucketfs.storage.protocol import (
    InvalidKeyError,
    ObjectMeta,
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
    ObjectStorePermissionError,
)

__all__ = [
    "InvalidKeyError",
    "ObjectMeta",
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectStoreError",
    "ObjectStorePermissionError",
    "create_store",
]

logger = get_logger(__name__)


def create_store(cfg: StorageConfig) -> ObjectStore:
    """Instantiate the object store backend selected by ``cfg.backend``."""
    match cfg.backend:
        case StorageBackend.FILESYSTEM:
            from bucketfs.storage.filesystem import FilesystemStore

            store: ObjectStore = FilesystemStore(root_dir=cfg.filesystem.root_dir)
            logger.info(
                "Storage initialized", backend="filesystem", root_dir=cfg.filesystem.root_dir
            )

        case StorageBackend.S3:
            from bucketfs.storage.s3 import S3Store

            store = S3Store(
                bucket=cfg.s3.bucket,
                region=cfg.s3.region,
                prefix=cfg.s3.prefix,
                endpoint_url=cfg.s3.endpoint_url,
                access_key_id=cfg.s3.access_key_id,
                secret_access_key=cfg.s3.secret_access_key.get_secret_value(),
                force_path_style=cfg.s3.force_path_style,
            )
            logger.info("Storage initialized", backend="s3", bucket=cfg.s3.bucket)

        case _:
            raise ValueError(f"Unsupported storage backend: {cfg.backend}")

    return store
