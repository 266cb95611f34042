"""Bounded in-process byte pipe.

Connects the copy loop of a save (writer) to the digest task (reader).
The writer blocks while ``depth`` chunks are waiting, so a slow reader
throttles the writer instead of growing a backlog.

Thread Safety:
    One writer thread and one reader thread. All state is guarded by a
    single condition variable.
"""

from __future__ import annotations

import threading
from collections import deque

from mini_s3.ports.inbound import PipeClosedError


class StreamPipe:
    """Bounded, blocking hand-off of byte chunks between two threads.

    Chunks are delivered in the order they were written. The reader side
    has a file-like ``read`` so any stream consumer can drain it.
    """

    def __init__(self, depth: int = 16) -> None:
        """Initialize the pipe.

        Args:
            depth: Maximum number of chunks buffered before write blocks.

        Raises:
            ValueError: If depth is less than 1.
        """
        if depth < 1:
            raise ValueError(f"depth must be at least 1, got {depth}")
        self._depth = depth
        self._chunks: deque[bytes] = deque()
        self._cond = threading.Condition()
        self._write_closed = False
        self._write_error: BaseException | None = None
        self._read_closed = False

    @property
    def buffered(self) -> int:
        """Chunks currently waiting for the reader."""
        with self._cond:
            return len(self._chunks)

    def write(self, data: bytes) -> int:
        """Hand a chunk to the reader, blocking while the pipe is full.

        Args:
            data: Bytes to pass on. Empty writes are ignored.

        Returns:
            Number of bytes accepted.

        Raises:
            PipeClosedError: If the reader stopped or the writer already closed.
        """
        if not data:
            return 0
        with self._cond:
            while (
                len(self._chunks) >= self._depth
                and not self._read_closed
                and not self._write_closed
            ):
                self._cond.wait()
            if self._read_closed:
                raise PipeClosedError("write on pipe whose reader has stopped")
            if self._write_closed:
                raise PipeClosedError("write on closed pipe")
            self._chunks.append(bytes(data))
            self._cond.notify_all()
        return len(data)

    def close(self, error: BaseException | None = None) -> None:
        """Close the write side.

        With no error the reader drains what is buffered and then sees EOF.
        With an error the reader fails on its next read and buffered chunks
        are dropped.

        Args:
            error: Failure that aborted the writer, if any.
        """
        with self._cond:
            if self._write_closed:
                return
            self._write_closed = True
            self._write_error = error
            if error is not None:
                self._chunks.clear()
            self._cond.notify_all()

    def read(self, size: int = -1) -> bytes:
        """Read the next chunk, blocking until one is available.

        Args:
            size: Maximum bytes to return; negative means a whole chunk.

        Returns:
            Up to ``size`` bytes, or b"" once the writer closed cleanly and
            the buffer is drained.

        Raises:
            PipeClosedError: If the writer aborted or the reader was closed.
        """
        if size == 0:
            return b""
        with self._cond:
            while not self._chunks and not self._write_closed and not self._read_closed:
                self._cond.wait()
            if self._read_closed:
                raise PipeClosedError("read on closed pipe")
            if self._write_error is not None:
                raise PipeClosedError("writer aborted") from self._write_error
            if not self._chunks:
                return b""
            chunk = self._chunks.popleft()
            if 0 < size < len(chunk):
                self._chunks.appendleft(chunk[size:])
                chunk = chunk[:size]
            self._cond.notify_all()
            return chunk

    def close_reader(self) -> None:
        """Stop the read side; pending and future writes fail."""
        with self._cond:
            self._read_closed = True
            self._chunks.clear()
            self._cond.notify_all()
