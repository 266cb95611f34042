"""Outbound adapters - filesystem persistence for objects.

These adapters implement the storage port on top of the local
filesystem, including the pipe that feeds the digest task.
"""

from mini_s3.adapters.outbound.local_storage import LocalStorage
from mini_s3.adapters.outbound.stream_pipe import StreamPipe

__all__ = [
    "LocalStorage",
    "StreamPipe",
]
