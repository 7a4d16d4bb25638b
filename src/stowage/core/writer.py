"""Atomic buffered object writer.

Bytes written to an ObjectWriter are staged locally and only reach the
backend when close() commits them. abort() discards the staged bytes
without contacting the backend, so a destination never holds a partial
object written through this class.

Lifecycle:
    OPEN --close()--> CLOSING --> COMMITTED | FAILED
    OPEN --abort()--> ABORTED
    CLOSING --abort() during transfer--> ABORTED

The first close() or abort() wins; later calls are no-ops.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from types import TracebackType
from uuid import uuid4

from stowage.config import Settings, WriterOptions
from stowage.core.content_type import resolve_content_type
from stowage.core.destination import parse_destination
from stowage.core.metadata import ObjectMetadata
from stowage.errors import (
    BackendError,
    CommitAbortedError,
    StagingError,
    UnverifiedCommitError,
    WriterClosedError,
)
from stowage.observability.logging import LogContext
from stowage.observability.metrics import get_metrics
from stowage.staging.buffer import StagingBuffer
from stowage.storage.base import BackendAdapter
from stowage.storage.factory import backend_for

logger = logging.getLogger(__name__)

COMPRESSED_EXTENSIONS = {".gz", ".gzip"}


class WriterState(str, Enum):
    """Lifecycle state of an ObjectWriter."""

    OPEN = "open"
    CLOSING = "closing"
    COMMITTED = "committed"
    FAILED = "failed"
    ABORTED = "aborted"


class ObjectWriter:
    """Writes to a local buffer and commits the contents to a backend on close().

    close() must be awaited for the written bytes to reach the backend.
    Awaiting abort() before close() discards the buffer; a later close()
    does nothing. Awaiting abort() after close() does nothing.

    Used as an async context manager, a clean exit commits and an
    exception aborts:

        async with ObjectWriter("s3://bucket/day.json.gz", backend) as w:
            w.write_line(b'{"a": 1}')
    """

    def __init__(
        self,
        path: str,
        backend: BackendAdapter,
        options: WriterOptions | None = None,
    ) -> None:
        """Initialize the writer and allocate its staging buffer.

        Args:
            path: Destination path (``scheme://container/key`` or local path)
            backend: Adapter for the destination store
            options: Staging and commit options

        Raises:
            ConfigurationError: If the destination path is invalid
            StagingError: If the spool file cannot be created
        """
        self.options = options or WriterOptions()
        self.destination = parse_destination(path)
        self.backend = backend
        self.id = uuid4().hex[:8]

        compress = self.options.compress or self.destination.extension in COMPRESSED_EXTENSIONS
        self._buffer = StagingBuffer(
            compress=compress,
            use_file_buffer=self.options.use_file_buffer,
            temp_dir=self.options.temp_dir,
            spool_threshold=self.options.spool_threshold,
            suffix=self.destination.extension,
        )
        self._metadata = ObjectMetadata(path=path)
        self._state = WriterState.OPEN
        self._lock = asyncio.Lock()
        self._transfer: asyncio.Task[int] | None = None
        self.metrics = get_metrics()

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def buffer(self) -> StagingBuffer:
        """The staging buffer; still readable after a retained failed commit."""
        return self._buffer

    def write(self, data: bytes) -> int:
        """Stage bytes. Returns the number of bytes accepted.

        Raises:
            WriterClosedError: If close() or abort() was already called
            StagingError: If the local buffer fails
        """
        if self._state is not WriterState.OPEN:
            raise WriterClosedError(self._metadata.path, self._state.value)
        return self._buffer.write(data)

    def write_line(self, data: bytes) -> None:
        """Stage bytes followed by a newline."""
        if self._state is not WriterState.OPEN:
            raise WriterClosedError(self._metadata.path, self._state.value)
        self._buffer.write_line(data)

    def stats(self) -> ObjectMetadata:
        """Snapshot of the object metadata.

        Before a successful commit, size and checksum describe the buffer
        and ``created`` is None. After it, they are the backend's values.
        """
        if self._state is WriterState.OPEN:
            self._sync_from_buffer()
        return self._metadata.copy()

    async def close(self) -> None:
        """Commit the buffered bytes to the backend.

        Raises:
            StagingError: If finalizing the buffer fails
            BackendError: If the transfer fails (nothing was written)
            UnverifiedCommitError: If the transfer succeeded but stat failed
            CommitAbortedError: If abort() interrupted the transfer
        """
        async with self._lock:
            if self._state is not WriterState.OPEN:
                return
            self._state = WriterState.CLOSING

        with LogContext(destination=self.destination.uri, writer_id=self.id):
            start = time.perf_counter()
            try:
                self._buffer.finalize()
            except StagingError:
                self._state = WriterState.FAILED
                self._release_buffer()
                self._record("failed", start)
                raise

            self._sync_from_buffer()
            content_type = resolve_content_type(self.destination.key, self.options.content_type)
            self._metadata.content_type = content_type

            self._transfer = asyncio.ensure_future(self._put(content_type))
            try:
                written = await self._transfer
            except asyncio.CancelledError:
                if self._state is WriterState.ABORTED:
                    # abort() cancelled the transfer and owns the cleanup
                    raise CommitAbortedError(self.destination.uri) from None
                self._state = WriterState.ABORTED
                self._release_buffer()
                self.metrics.aborts_total.labels(backend=self.backend.name, phase="cancel").inc()
                logger.warning(f"Commit to {self.destination.uri} cancelled during transfer")
                raise
            except Exception as e:
                self._state = WriterState.FAILED
                self._record("failed", start)
                if self.options.keep_failed:
                    self._buffer.reset()
                    logger.warning(
                        f"Transfer to {self.destination.uri} failed; "
                        f"keeping buffer at {self._buffer.path or '<memory>'}: {e}"
                    )
                else:
                    self._release_buffer()
                    logger.error(f"Transfer to {self.destination.uri} failed: {e}")
                if isinstance(e, BackendError):
                    raise
                raise BackendError(f"transfer failed: {e}", self.destination.uri) from e
            finally:
                self._transfer = None

            # The object is durable from here on; abort() no longer applies
            try:
                info = await self.backend.stat_object(
                    self.destination.container, self.destination.key
                )
            except asyncio.CancelledError:
                self._state = WriterState.COMMITTED
                self._release_buffer()
                raise
            except Exception as e:
                self._state = WriterState.COMMITTED
                self._release_buffer()
                self._record("unverified", start, written)
                logger.warning(f"Wrote {self.destination.uri} but stat failed: {e}")
                raise UnverifiedCommitError(self.destination.uri, e) from e

            self._metadata.created = info.modified
            self._metadata.checksum = info.checksum
            self._metadata.size = info.size
            self._state = WriterState.COMMITTED
            self._record("committed", start, written)
            logger.info(f"Committed {info.size} bytes to {self.destination.uri}")

            self._release_buffer()

    async def abort(self) -> None:
        """Discard the buffered bytes without contacting the backend.

        Aborting during a commit's transfer cancels the transfer. Once
        the transfer has returned, or after any terminal state, this is
        a no-op.
        """
        async with self._lock:
            transfer = self._transfer
            if self._state is WriterState.OPEN:
                phase = "open"
                self._sync_from_buffer()
            elif (
                self._state is WriterState.CLOSING
                and transfer is not None
                and not transfer.done()
            ):
                phase = "transfer"
            else:
                return
            self._state = WriterState.ABORTED

        with LogContext(destination=self.destination.uri, writer_id=self.id):
            if transfer is not None and phase == "transfer":
                transfer.cancel()
                await asyncio.wait([transfer])

            self.metrics.aborts_total.labels(backend=self.backend.name, phase=phase).inc()
            logger.info(f"Aborted writer for {self.destination.uri} ({phase})")
            self._buffer.cleanup()

    async def __aenter__(self) -> "ObjectWriter":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            await self.close()
        else:
            await self.abort()

    async def _put(self, content_type: str) -> int:
        if self._buffer.is_spooled:
            return await self.backend.put_from_path(
                self.destination.container,
                self.destination.key,
                self._buffer.path,  # type: ignore[arg-type]
                content_type,
            )
        return await self.backend.put_from_stream(
            self.destination.container,
            self.destination.key,
            self._buffer.reader(),
            self._buffer.size,
            content_type,
        )

    def _sync_from_buffer(self) -> None:
        self._metadata.size = self._buffer.size
        self._metadata.checksum = self._buffer.checksum
        self._metadata.line_count = self._buffer.stats().line_count

    def _release_buffer(self) -> None:
        """Clean up the buffer without masking the outcome of the commit."""
        try:
            self._buffer.cleanup()
        except StagingError as e:
            logger.warning(f"Failed to release staging buffer: {e}")

    def _record(self, outcome: str, start: float, written: int = 0) -> None:
        backend = self.backend.name
        self.metrics.commits_total.labels(backend=backend, outcome=outcome).inc()
        self.metrics.commit_duration_seconds.labels(backend=backend).observe(
            time.perf_counter() - start
        )
        if written:
            self.metrics.bytes_committed_total.labels(backend=backend).inc(written)


def open_writer(
    path: str,
    backend: BackendAdapter | None = None,
    options: WriterOptions | None = None,
    config: Settings | None = None,
) -> ObjectWriter:
    """Create an ObjectWriter, resolving the backend from the destination scheme.

    Args:
        path: Destination path
        backend: Explicit adapter; resolved from the scheme when None
        options: Writer options; built from settings when None
        config: Settings used for backend and option defaults
    """
    if backend is None:
        backend = backend_for(parse_destination(path), config)
    if options is None:
        options = WriterOptions.from_settings(config)
    return ObjectWriter(path, backend, options)
