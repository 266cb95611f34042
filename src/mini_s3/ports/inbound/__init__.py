"""Inbound ports - API contracts for the object store.

Inbound ports define the interfaces that the CLI and library callers
use to store, verify and enumerate objects.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import BinaryIO, Protocol

from mini_s3.domain.entities.object_info import ObjectInfo


# =============================================================================
# Errors
# =============================================================================


class StorageError(Exception):
    """Base class for object store errors."""

    pass


class ObjectNotFoundError(StorageError):
    """Raised when a bucket or key does not exist on disk."""

    def __init__(self, bucket: str, key: str):
        self.bucket = bucket
        self.key = key
        super().__init__(f"object not found: {bucket}/{key}")


class InvalidChecksumError(StorageError):
    """Raised when a stored object does not match the expected digest."""

    def __init__(self, got: str, expected: str):
        self.got = got
        self.expected = expected
        super().__init__(f"invalid checksum: got {got}, expected {expected}")


class PipeClosedError(StorageError):
    """Raised on a write to a stream pipe whose reader has stopped."""

    pass


# =============================================================================
# Checksum Port
# =============================================================================


class ChecksumPort(Protocol):
    """Protocol for content digest computation.

    Thread Safety:
        Implementations hold no per-stream state.
    """

    @abstractmethod
    def generate(self, stream: BinaryIO) -> str:
        """Digest a stream until EOF.

        Args:
            stream: Readable binary stream.

        Returns:
            Hex digest.
        """
        ...

    @abstractmethod
    def verify(self, stream: BinaryIO, expected: str) -> tuple[bool, str]:
        """Digest a stream and compare with an expected digest.

        Args:
            stream: Readable binary stream.
            expected: Expected hex digest.

        Returns:
            (matches, actual digest).
        """
        ...


# =============================================================================
# Storage Port
# =============================================================================


class StoragePort(Protocol):
    """Protocol for bucket/key object storage.

    Integrity:
        save() digests the bytes as they are written; get() re-reads the
        whole object and refuses to return a stream on mismatch.

    Thread Safety:
        Calls may run concurrently. Nothing serializes access to a single
        key; concurrent writers to one key race.

    Example:
        info = storage.save("photos", "cat.jpg", fh)
        stream, info = storage.get("photos", "cat.jpg", info.checksum)
        with stream:
            data = stream.read()
    """

    @abstractmethod
    def save(self, bucket: str, key: str, stream: BinaryIO) -> ObjectInfo:
        """Persist a stream, replacing any existing object.

        Args:
            bucket: Bucket name.
            key: Object key.
            stream: Source of object bytes.

        Returns:
            Descriptor with size and checksum of the bytes written.
        """
        ...

    @abstractmethod
    def get(self, bucket: str, key: str, expected_checksum: str) -> tuple[BinaryIO, ObjectInfo]:
        """Open an object after verifying its checksum.

        Args:
            bucket: Bucket name.
            key: Object key.
            expected_checksum: Digest the object must match.

        Returns:
            Open binary stream positioned at offset 0, and its descriptor.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            InvalidChecksumError: If the stored bytes do not match.
        """
        ...

    @abstractmethod
    def delete(self, bucket: str, key: str) -> None:
        """Delete an object.

        Raises:
            ObjectNotFoundError: If the object does not exist.
        """
        ...

    @abstractmethod
    def exists(self, bucket: str, key: str) -> bool:
        """Check whether an object exists."""
        ...

    @abstractmethod
    def list_objects(self, bucket: str) -> list[ObjectInfo]:
        """List objects directly under a bucket.

        Checksums are not computed; every entry has an empty checksum.
        """
        ...


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Errors
    "StorageError",
    "ObjectNotFoundError",
    "InvalidChecksumError",
    "PipeClosedError",
    # Checksum
    "ChecksumPort",
    # Storage
    "StoragePort",
]
