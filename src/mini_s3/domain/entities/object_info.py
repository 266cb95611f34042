"""Stored object descriptor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ObjectInfo:
    """An object stored under ``<root>/<bucket>/<key>``.

    ``checksum`` is the digest of the bytes at ``path`` when the object was
    last written or verified. Listings leave it empty.
    """

    bucket: str
    key: str
    size: int
    checksum: str
    created_at: datetime
    path: str

    @property
    def full_name(self) -> str:
        """Get bucket/key name.

        Returns:
            Bucket/key string.
        """
        return f"{self.bucket}/{self.key}"
