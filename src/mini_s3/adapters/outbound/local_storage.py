"""Local filesystem storage engine.

Objects live at ``<root>/<bucket>/<key>`` as raw bytes with no header and
no sidecar metadata. Checksums are never stored; save() digests the bytes
as they are written and get() recomputes the digest from disk.

Save:
    The caller's thread copies the input to the file and pushes every chunk
    into a StreamPipe. A single worker drains the pipe into the checksum
    service. Save joins both sides before returning. If the copy fails the
    pipe is aborted and the copy error is raised; if only the digest fails
    its error is raised. When both fail the copy error wins.

Known gaps:
    - No temp-file-and-rename: a failed save may leave a truncated file.
    - No per-key locking between concurrent save/delete/get calls.
    - Bucket and key are joined onto the root as given; ``..`` segments are
      not rejected.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from opentelemetry import trace

from mini_s3.adapters.outbound.stream_pipe import StreamPipe
from mini_s3.domain.entities.object_info import ObjectInfo
from mini_s3.domain.services.checksum_service import DEFAULT_READ_SIZE
from mini_s3.infrastructure.logging import get_logger
from mini_s3.infrastructure.metrics import StorageMetrics, get_metrics
from mini_s3.infrastructure.tracing import get_tracer
from mini_s3.ports.inbound import (
    ChecksumPort,
    InvalidChecksumError,
    ObjectNotFoundError,
    PipeClosedError,
)


class LocalStorage:
    """Filesystem implementation of the StoragePort protocol.

    Attributes:
        root: Directory holding one subdirectory per bucket.
    """

    def __init__(
        self,
        root: str | Path,
        checksum: ChecksumPort,
        chunk_size: int = DEFAULT_READ_SIZE,
        pipe_depth: int = 16,
        sync_writes: bool = True,
        dir_mode: int = 0o755,
        metrics: StorageMetrics | None = None,
        tracer: trace.Tracer | None = None,
    ) -> None:
        """Initialize the storage engine.

        Args:
            root: Root data directory (created lazily by save).
            checksum: Digest implementation.
            chunk_size: Bytes read from the input per copy step.
            pipe_depth: Chunks buffered between copy loop and digest task.
            sync_writes: fsync each object before save returns.
            dir_mode: Mode for newly created bucket directories.
            metrics: Metrics collector (default: process-wide instance).
            tracer: Tracer (default: global tracer).
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.root = Path(root)
        self._checksum = checksum
        self._chunk_size = chunk_size
        self._pipe_depth = pipe_depth
        self._sync_writes = sync_writes
        self._dir_mode = dir_mode
        self._metrics = metrics or get_metrics()
        self._tracer = tracer or get_tracer()
        self._logger = get_logger(__name__, component="local_storage")

    def _object_path(self, bucket: str, key: str) -> Path:
        return self.root / bucket / key

    # -------------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------------

    def save(self, bucket: str, key: str, stream: BinaryIO) -> ObjectInfo:
        """Persist a stream under bucket/key, overwriting any existing object.

        Args:
            bucket: Bucket name (directory, created if absent).
            key: Object key (file name).
            stream: Source of object bytes, read until EOF.

        Returns:
            Descriptor whose size and checksum describe the bytes written.

        Raises:
            OSError: If the directory, file, input or write fails.
            PipeClosedError: If the digest task failed.
        """
        created_at = datetime.now(timezone.utc)
        started = time.perf_counter()

        with self._tracer.start_as_current_span("storage.save") as span:
            span.set_attribute("bucket", bucket)
            span.set_attribute("key", key)
            try:
                bucket_dir = self.root / bucket
                bucket_dir.mkdir(mode=self._dir_mode, parents=True, exist_ok=True)
                path = bucket_dir / key
                size, checksum = self._write_and_digest(stream, path)
            except Exception as exc:
                self._record_failure("save", exc)
                raise

            span.set_attribute("size", size)

        self._metrics.objects_saved.labels(bucket=bucket).inc()
        self._metrics.bytes_uploaded.labels(bucket=bucket).inc(size)
        self._metrics.save_latency.labels(bucket=bucket).observe(time.perf_counter() - started)
        info = ObjectInfo(
            bucket=bucket,
            key=key,
            size=size,
            checksum=checksum,
            created_at=created_at,
            path=str(path),
        )
        self._logger.info("object_saved", object=info.full_name, size=size, checksum=checksum)
        return info

    def _write_and_digest(self, stream: BinaryIO, path: Path) -> tuple[int, str]:
        """Copy stream to path while a worker digests the same bytes.

        Returns:
            (bytes written, hex digest).
        """
        pipe = StreamPipe(depth=self._pipe_depth)

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="mini-s3-digest") as pool:
            digest = pool.submit(self._digest, pipe)
            try:
                with open(path, "wb") as out:
                    size = self._copy(stream, out, pipe)
            except PipeClosedError:
                # Digest side stopped first; its error is raised below.
                size = -1
            except BaseException as exc:
                pipe.close(error=exc)
                raise
            else:
                pipe.close()

            checksum = digest.result()

        if size < 0:
            raise PipeClosedError("digest task stopped before the copy finished")
        return size, checksum

    def _copy(self, stream: BinaryIO, out: BinaryIO, pipe: StreamPipe) -> int:
        size = 0
        while True:
            chunk = stream.read(self._chunk_size)
            if not chunk:
                break
            out.write(chunk)
            pipe.write(chunk)
            size += len(chunk)
        if self._sync_writes:
            out.flush()
            os.fsync(out.fileno())
        return size

    def _digest(self, pipe: StreamPipe) -> str:
        try:
            return self._checksum.generate(pipe)
        finally:
            pipe.close_reader()

    # -------------------------------------------------------------------------
    # Get
    # -------------------------------------------------------------------------

    def get(self, bucket: str, key: str, expected_checksum: str) -> tuple[BinaryIO, ObjectInfo]:
        """Open an object after verifying it against an expected checksum.

        The whole object is read to recompute its digest. On a mismatch the
        file is closed and no stream is returned.

        Args:
            bucket: Bucket name.
            key: Object key.
            expected_checksum: Hex digest the stored bytes must match.

        Returns:
            Open binary file at offset 0 (the caller closes it) and descriptor.

        Raises:
            ObjectNotFoundError: If the bucket or key does not exist.
            InvalidChecksumError: If the digest does not match.
            OSError: On any other filesystem failure.
        """
        started = time.perf_counter()
        path = self._object_path(bucket, key)

        with self._tracer.start_as_current_span("storage.get") as span:
            span.set_attribute("bucket", bucket)
            span.set_attribute("key", key)
            try:
                stream, info = self._open_verified(bucket, key, path, expected_checksum)
            except Exception as exc:
                self._record_failure("get", exc)
                raise

            span.set_attribute("size", info.size)

        self._metrics.objects_read.labels(bucket=bucket).inc()
        self._metrics.bytes_verified.labels(bucket=bucket).inc(info.size)
        self._metrics.get_latency.labels(bucket=bucket).observe(time.perf_counter() - started)
        self._logger.debug("object_read", object=info.full_name, size=info.size)
        return stream, info

    def _open_verified(
        self, bucket: str, key: str, path: Path, expected_checksum: str
    ) -> tuple[BinaryIO, ObjectInfo]:
        try:
            fh = open(path, "rb")
        except FileNotFoundError as exc:
            raise ObjectNotFoundError(bucket, key) from exc

        try:
            stat = os.fstat(fh.fileno())
            matches, actual = self._checksum.verify(fh, expected_checksum)
            if not matches:
                self._metrics.checksum_verifications.labels(result="mismatch").inc()
                self._metrics.integrity_errors.labels(bucket=bucket).inc()
                self._logger.warning(
                    "checksum_mismatch",
                    bucket=bucket,
                    key=key,
                    got=actual,
                    expected=expected_checksum,
                )
                raise InvalidChecksumError(got=actual, expected=expected_checksum)
            self._metrics.checksum_verifications.labels(result="match").inc()
            fh.seek(0, os.SEEK_SET)
        except BaseException:
            fh.close()
            raise

        info = ObjectInfo(
            bucket=bucket,
            key=key,
            size=stat.st_size,
            checksum=actual,
            created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            path=str(path),
        )
        return fh, info

    # -------------------------------------------------------------------------
    # Delete / Exists / List
    # -------------------------------------------------------------------------

    def delete(self, bucket: str, key: str) -> None:
        """Remove the file at bucket/key.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            OSError: On any other filesystem failure.
        """
        started = time.perf_counter()
        path = self._object_path(bucket, key)

        with self._tracer.start_as_current_span("storage.delete") as span:
            span.set_attribute("bucket", bucket)
            span.set_attribute("key", key)
            try:
                try:
                    os.remove(path)
                except FileNotFoundError as exc:
                    raise ObjectNotFoundError(bucket, key) from exc
            except Exception as exc:
                self._record_failure("delete", exc)
                raise

        self._metrics.objects_deleted.labels(bucket=bucket).inc()
        self._metrics.delete_latency.labels(bucket=bucket).observe(time.perf_counter() - started)
        self._logger.info("object_deleted", bucket=bucket, key=key)

    def exists(self, bucket: str, key: str) -> bool:
        """Check whether bucket/key exists.

        Returns:
            False when the path is absent.

        Raises:
            OSError: For stat failures other than a missing path.
        """
        try:
            os.stat(self._object_path(bucket, key))
        except FileNotFoundError:
            return False
        return True

    def list_objects(self, bucket: str) -> list[ObjectInfo]:
        """List files directly under a bucket, sorted by key.

        Sizes and times come from filesystem metadata; no checksum is
        computed and every entry's checksum is empty.

        Raises:
            OSError: If the bucket directory cannot be read (including when
                it does not exist).
        """
        started = time.perf_counter()
        bucket_dir = self.root / bucket

        with self._tracer.start_as_current_span("storage.list_objects") as span:
            span.set_attribute("bucket", bucket)
            try:
                with os.scandir(bucket_dir) as entries:
                    files = sorted(
                        (entry for entry in entries if not entry.is_dir()),
                        key=lambda entry: entry.name,
                    )
                    infos = [self._describe(bucket, entry) for entry in files]
            except Exception as exc:
                self._record_failure("list_objects", exc)
                raise

            span.set_attribute("count", len(infos))

        self._metrics.list_latency.labels(bucket=bucket).observe(time.perf_counter() - started)
        self._logger.debug("objects_listed", bucket=bucket, count=len(infos))
        return infos

    def _describe(self, bucket: str, entry: os.DirEntry) -> ObjectInfo:
        stat = entry.stat()
        return ObjectInfo(
            bucket=bucket,
            key=entry.name,
            size=stat.st_size,
            checksum="",
            created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            path=entry.path,
        )

    def _record_failure(self, operation: str, exc: Exception) -> None:
        self._metrics.request_errors.labels(
            operation=operation, error_type=type(exc).__name__
        ).inc()
