"""Domain services."""

from mini_s3.domain.services.checksum_service import ChecksumService

__all__ = [
    "ChecksumService",
]
