"""Checksum service for content digests."""

from __future__ import annotations

import hashlib
from typing import BinaryIO

DEFAULT_ALGORITHM = "sha256"
DEFAULT_READ_SIZE = 64 * 1024


class ChecksumService:
    """Deterministic content digests over byte streams.

    Holds no per-stream state, so one instance can digest many streams
    concurrently.
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, read_size: int = DEFAULT_READ_SIZE):
        """Initialize checksum service.

        Args:
            algorithm: hashlib algorithm name.
            read_size: Bytes requested per read.

        Raises:
            ValueError: If the algorithm is unknown or read_size is not positive.
        """
        if read_size <= 0:
            raise ValueError(f"read_size must be positive, got {read_size}")
        hashlib.new(algorithm)
        self.algorithm = algorithm
        self.read_size = read_size

    def generate(self, stream: BinaryIO) -> str:
        """Digest a stream until EOF.

        Args:
            stream: Readable binary stream.

        Returns:
            Lowercase hex digest.
        """
        hasher = hashlib.new(self.algorithm)
        while True:
            chunk = stream.read(self.read_size)
            if not chunk:
                break
            hasher.update(chunk)
        return hasher.hexdigest()

    def verify(self, stream: BinaryIO, expected: str) -> tuple[bool, str]:
        """Digest a stream and compare it with an expected value.

        The comparison is an exact, case-sensitive string match. A mismatch
        is reported through the flag, not raised.

        Args:
            stream: Readable binary stream.
            expected: Expected hex digest.

        Returns:
            (matches, actual digest).
        """
        actual = self.generate(stream)
        return actual == expected, actual
