"""In-process backend keeping objects in a dict.

Used for tests and the ``mem://`` scheme.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from stowage.errors import ObjectNotFoundError
from stowage.storage.base import BackendAdapter, ObjectInfo


@dataclass
class StoredObject:
    data: bytes
    content_type: str
    modified: datetime


class MemoryBackend(BackendAdapter):
    """Dict-backed object store."""

    name = "mem"

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], StoredObject] = {}

    async def put_from_path(
        self,
        container: str,
        key: str,
        local_path: str | Path,
        content_type: str,
    ) -> int:
        data = await asyncio.to_thread(Path(local_path).read_bytes)
        return self._store(container, key, data, content_type)

    async def put_from_stream(
        self,
        container: str,
        key: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        return self._store(container, key, reader.read(size), content_type)

    async def stat_object(self, container: str, key: str) -> ObjectInfo:
        stored = self.objects.get((container, key))
        if stored is None:
            raise ObjectNotFoundError(self.describe(container, key))
        return ObjectInfo(
            modified=stored.modified,
            checksum=self.compute_hash(stored.data),
            size=len(stored.data),
        )

    def get(self, container: str, key: str) -> bytes:
        """Return stored bytes (KeyError when absent)."""
        return self.objects[(container, key)].data

    def _store(self, container: str, key: str, data: bytes, content_type: str) -> int:
        self.objects[(container, key)] = StoredObject(
            data=data,
            content_type=content_type,
            modified=datetime.now(UTC),
        )
        return len(data)
