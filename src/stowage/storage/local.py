"""Local filesystem backend.

Objects live at ``{base_path}/{container}/{key}``; absolute keys (from
bare or ``file://`` destinations) are used as-is. Uploads land in a
hidden temp file next to the target and are renamed into place, so a
partially copied file is never visible under the final name.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO, cast
from uuid import uuid4

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from stowage.errors import BackendError, ObjectNotFoundError
from stowage.storage.base import BackendAdapter, ObjectInfo

logger = logging.getLogger(__name__)


class LocalBackend(BackendAdapter):
    """Local filesystem backend."""

    name = "file"

    def __init__(self, base_path: str | Path = "."):
        """Initialize local backend.

        Args:
            base_path: Root directory for relative keys
        """
        self.base_path = Path(base_path)

    def _object_path(self, container: str, key: str) -> Path:
        return self.base_path / container / key

    def describe(self, container: str, key: str) -> str:
        return str(self._object_path(container, key))

    async def _ensure_directory(self, path: Path) -> None:
        """Ensure directory exists."""
        if not await aiofiles.os.path.exists(path):
            await aiofiles.os.makedirs(path, exist_ok=True)

    async def put_from_path(
        self,
        container: str,
        key: str,
        local_path: str | Path,
        content_type: str,
    ) -> int:
        """Copy a local file into place."""
        try:
            async with aiofiles.open(local_path, "rb") as src:
                return await self._write_atomic(container, key, src.read)
        except OSError as e:
            raise BackendError(f"local put failed: {e}", self.describe(container, key)) from e

    async def put_from_stream(
        self,
        container: str,
        key: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        """Copy ``size`` bytes from reader into place."""
        remaining = size

        async def read_chunk(n: int) -> bytes:
            nonlocal remaining
            chunk = reader.read(min(n, remaining))
            remaining -= len(chunk)
            return chunk

        try:
            return await self._write_atomic(container, key, read_chunk)
        except OSError as e:
            raise BackendError(f"local put failed: {e}", self.describe(container, key)) from e

    async def _write_atomic(
        self, container: str, key: str, read_chunk: Callable[[int], Awaitable[bytes]]
    ) -> int:
        target = self._object_path(container, key)
        await self._ensure_directory(target.parent)
        tmp = target.parent / f".{target.name}.{uuid4().hex}.tmp"

        written = 0
        try:
            async with aiofiles.open(tmp, "wb") as dst:
                while True:
                    chunk = await read_chunk(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    await dst.write(chunk)
                    written += len(chunk)
            await aiofiles.os.replace(tmp, target)
        except BaseException:
            # Also runs on cancellation so no temp file is left behind
            if await aiofiles.os.path.exists(tmp):
                await aiofiles.os.remove(tmp)
            raise

        logger.debug(f"Stored {written} bytes at {target}")
        return written

    async def stat_object(self, container: str, key: str) -> ObjectInfo:
        """Stat a stored file; the checksum is the MD5 of its contents."""
        target = self._object_path(container, key)
        try:
            st = await aiofiles.os.stat(target)
            checksum = await self._file_md5(target)
        except FileNotFoundError as e:
            raise ObjectNotFoundError(str(target)) from e
        except OSError as e:
            raise BackendError(f"local stat failed: {e}", str(target)) from e

        return ObjectInfo(
            modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
            checksum=checksum,
            size=st.st_size,
        )

    async def _file_md5(self, path: Path) -> str:
        hasher = hashlib.md5(usedforsecurity=False)
        async with aiofiles.open(path, "rb") as f:
            while True:
                chunk = await f.read(self.CHUNK_SIZE)
                if not chunk:
                    break
                hasher.update(chunk)
        return cast(str, hasher.hexdigest())
