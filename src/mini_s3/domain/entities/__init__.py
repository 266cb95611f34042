"""Domain entities."""

from mini_s3.domain.entities.object_info import ObjectInfo

__all__ = [
    "ObjectInfo",
]
