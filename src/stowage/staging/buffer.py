"""Local staging buffer for object writers.

Bytes are staged in memory and roll over to a spool file once the stored
size passes a threshold (or spool from the first byte when a file buffer
is forced). Optional gzip compression is applied as bytes arrive.

Size and checksum are accumulated over the stored bytes while writing,
so they describe exactly what a backend transfer will send and never
require re-reading the payload.
"""

from __future__ import annotations

import gzip
import hashlib
import io
import logging
import os
import tempfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from stowage.errors import StagingError

logger = logging.getLogger(__name__)

LINE_DELIMITER = b"\n"


@dataclass
class BufferStats:
    """Point-in-time view of a staging buffer."""

    size: int = 0
    raw_size: int = 0
    checksum: str = ""
    line_count: int = 0
    path: str | None = None


class _HashingSink:
    """Byte sink that hashes and counts everything reaching storage."""

    def __init__(self, target: BinaryIO) -> None:
        self.target = target
        self.hasher = hashlib.md5(usedforsecurity=False)
        self.size = 0

    def write(self, data: bytes) -> int:
        self.target.write(data)
        self.hasher.update(data)
        self.size += len(data)
        return len(data)

    def flush(self) -> None:
        self.target.flush()


class StagingBuffer:
    """Single-writer staging buffer with memory and spooled-file strategies.

    Lifecycle: write()/write_line() → finalize() → read()/reset() → cleanup().
    """

    def __init__(
        self,
        compress: bool = False,
        use_file_buffer: bool = False,
        temp_dir: str | Path | None = None,
        spool_threshold: int = 0,
        suffix: str = "",
    ) -> None:
        """Initialize the buffer.

        Args:
            compress: Gzip bytes as they arrive
            use_file_buffer: Spool to a temp file from the first byte
            temp_dir: Directory for spool files (system default when None)
            spool_threshold: Roll over to a spool file past this many
                stored bytes; 0 keeps memory buffers in memory
            suffix: Suffix for spool file names
        """
        self.compress = compress
        self.temp_dir = str(temp_dir) if temp_dir is not None else None
        self.spool_threshold = spool_threshold
        self.suffix = suffix

        self._path: str | None = None
        self._raw_size = 0
        self._line_count = 0
        self._finalized = False
        self._cleaned = False
        self._failed = False
        self._checksum = ""
        self._size = 0

        target: BinaryIO
        if use_file_buffer:
            self._path, target = self._open_spool()
        else:
            target = io.BytesIO()
        self._sink = _HashingSink(target)
        self._gzip: gzip.GzipFile | None = None
        if compress:
            # mtime=0 keeps compressed output deterministic for identical input
            self._gzip = gzip.GzipFile(fileobj=self._sink, mode="wb", mtime=0)  # type: ignore[arg-type]

    @property
    def path(self) -> str | None:
        """Spool file path, or None while the payload is held in memory."""
        return self._path

    @property
    def is_spooled(self) -> bool:
        return self._path is not None

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def size(self) -> int:
        return self._size if self._finalized else self._sink.size

    @property
    def checksum(self) -> str:
        if self._finalized:
            return self._checksum
        return self._sink.hasher.copy().hexdigest()

    def stats(self) -> BufferStats:
        return BufferStats(
            size=self.size,
            raw_size=self._raw_size,
            checksum=self.checksum,
            line_count=self._line_count,
            path=self._path,
        )

    def write(self, data: bytes) -> int:
        """Append bytes. Returns the number of caller bytes accepted."""
        if self._finalized or self._cleaned:
            raise StagingError("staging buffer no longer accepts writes")
        if self._failed:
            raise StagingError("staging buffer is unusable after an earlier failure")

        try:
            if self._gzip is not None:
                n = self._gzip.write(data)
            else:
                n = self._sink.write(data)
        except (OSError, zlib.error) as e:
            self._failed = True
            raise StagingError(f"staging write failed: {e}") from e

        self._raw_size += n
        self._maybe_rollover()
        return n

    def write_line(self, data: bytes) -> None:
        self.write(data + LINE_DELIMITER)
        self._line_count += 1

    def finalize(self) -> None:
        """Stop accepting writes and lock in size and checksum."""
        if self._finalized:
            return
        if self._cleaned:
            raise StagingError("staging buffer already cleaned up")
        if self._failed:
            raise StagingError("staging buffer is unusable after an earlier failure")

        try:
            if self._gzip is not None:
                self._gzip.close()
            self._sink.flush()
        except (OSError, zlib.error) as e:
            self._failed = True
            raise StagingError(f"staging finalize failed: {e}") from e

        # Compressor output can trail the input, so check the threshold again
        self._maybe_rollover()
        self._sink.flush()

        self._size = self._sink.size
        self._checksum = self._sink.hasher.hexdigest()
        self._finalized = True
        self.reset()

    def reset(self) -> None:
        """Rewind to the start of the stored bytes without releasing storage."""
        if not self._finalized:
            raise StagingError("staging buffer must be finalized before reading")
        if self._cleaned:
            raise StagingError("staging buffer already cleaned up")
        self._sink.target.seek(0)

    def reader(self) -> BinaryIO:
        """Return the underlying storage positioned at the start."""
        self.reset()
        return self._sink.target

    def read(self, size: int = -1) -> bytes:
        if not self._finalized:
            raise StagingError("staging buffer must be finalized before reading")
        if self._cleaned:
            raise StagingError("staging buffer already cleaned up")
        return self._sink.target.read(size)

    def cleanup(self) -> None:
        """Release storage and delete the spool file if any."""
        if self._cleaned:
            return
        self._cleaned = True

        try:
            if self._gzip is not None and not self._gzip.closed:
                self._gzip.close()
            self._sink.target.close()
            if self._path is not None:
                os.remove(self._path)
                logger.debug(f"Removed spool file {self._path}")
        except FileNotFoundError:
            pass
        except (OSError, zlib.error) as e:
            raise StagingError(f"staging cleanup failed: {e}") from e

    def _open_spool(self) -> tuple[str, BinaryIO]:
        try:
            fd, path = tempfile.mkstemp(prefix="stowage-", suffix=self.suffix, dir=self.temp_dir)
        except OSError as e:
            raise StagingError(f"cannot create spool file in {self.temp_dir}: {e}") from e
        logger.debug(f"Spooling to {path}")
        return path, os.fdopen(fd, "w+b")

    def _maybe_rollover(self) -> None:
        if self._path is not None or self.spool_threshold <= 0:
            return
        if self._sink.size <= self.spool_threshold:
            return

        memory = self._sink.target
        try:
            path, spool = self._open_spool()
        except StagingError:
            self._failed = True
            raise

        try:
            spool.write(memory.getvalue())  # type: ignore[attr-defined]
            spool.flush()
        except OSError as e:
            self._failed = True
            _discard_spool(spool, path)
            raise StagingError(f"spool rollover failed: {e}") from e

        # Only a complete copy makes the spool file the buffer's storage
        self._path = path
        self._sink.target = spool
        memory.close()


def _discard_spool(spool: BinaryIO, path: str) -> None:
    """Close and delete a spool file that never became the buffer's storage."""
    try:
        spool.close()
    except OSError as e:
        logger.warning(f"Failed to close abandoned spool file {path}: {e}")
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove abandoned spool file {path}: {e}")
