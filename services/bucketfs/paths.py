"""
Path to key mapping.

A path is used verbatim as the object key. Separators are ordinary
characters: ``pages/index.js`` is one key, and no ``pages`` entity exists.
"""

from __future__ import annotations

import os

from bucketfs.errors import InvalidPathError


def path_to_key(path: str | os.PathLike[str], operation: str = "map") -> str:
    """Return the object key for ``path``."""
    key = os.fspath(path)
    if not isinstance(key, str):
        raise InvalidPathError(operation, repr(path), "bytes paths are not supported")
    if not key:
        raise InvalidPathError(operation, key, "empty path")
    return key


def key_to_name(key: str) -> str:
    """Return the name a listing reports for ``key``."""
    return key
