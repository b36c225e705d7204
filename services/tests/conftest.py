"""
Top-level test configuration for bucketfs.
"""

import os

# Ensure test-friendly defaults
os.environ.setdefault("BUCKETFS_STORAGE__BACKEND", "filesystem")
os.environ.setdefault("BUCKETFS_JSON_LOGS", "false")
os.environ.setdefault("BUCKETFS_LOG_LEVEL", "DEBUG")
os.environ.setdefault("BUCKETFS_CONFIG_FILE", "/nonexistent/bucketfs.yaml")

from collections.abc import AsyncGenerator  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest_asyncio  # noqa: E402

from bucketfs.fs import BucketFS  # noqa: E402
from bucketfs.storage.filesystem import FilesystemStore  # noqa: E402


@pytest_asyncio.fixture
async def bucket_fs(tmp_path: Path) -> AsyncGenerator[BucketFS]:
    """A BucketFS over a FilesystemStore rooted in a temporary directory."""
    async with BucketFS(FilesystemStore(root_dir=str(tmp_path / "bucket")), name="test") as fs:
        yield fs
