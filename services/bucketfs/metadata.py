"""
Status records translated from object metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bucketfs.storage.protocol import ObjectMeta


@dataclass(frozen=True)
class StatResult:
    """Size and modification time of one object, as of the head request.

    ``st_size`` and ``st_mtime`` mirror os.stat_result for callers that read
    those attributes.
    """

    size: int
    mtime: datetime

    @property
    def st_size(self) -> int:
        return self.size

    @property
    def st_mtime(self) -> float:
        return self.mtime.timestamp()


def stat_from_meta(meta: ObjectMeta) -> StatResult:
    return StatResult(size=meta.size_bytes, mtime=meta.last_modified)
