"""Global pytest configuration and fixtures.

Provides a recording backend with failure injection for writer tests.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import BinaryIO

import pytest

from stowage.storage.base import ObjectInfo
from stowage.storage.factory import reset_backends
from stowage.storage.memory import MemoryBackend


class RecordingBackend(MemoryBackend):
    """MemoryBackend that records calls and can fail or block on demand."""

    name = "recording"

    def __init__(
        self,
        put_error: Exception | None = None,
        stat_error: Exception | None = None,
        block_put: bool = False,
        block_stat: bool = False,
    ) -> None:
        super().__init__()
        self.calls: list[str] = []
        self.put_error = put_error
        self.stat_error = stat_error
        self.block_put = block_put
        self.block_stat = block_stat
        self.put_started = asyncio.Event()
        self.release_put = asyncio.Event()
        self.stat_started = asyncio.Event()
        self.release_stat = asyncio.Event()

    async def _before_put(self, method: str) -> None:
        self.calls.append(method)
        self.put_started.set()
        if self.block_put:
            await self.release_put.wait()
        if self.put_error is not None:
            raise self.put_error

    async def put_from_path(
        self,
        container: str,
        key: str,
        local_path: str | Path,
        content_type: str,
    ) -> int:
        await self._before_put("put_from_path")
        return await super().put_from_path(container, key, local_path, content_type)

    async def put_from_stream(
        self,
        container: str,
        key: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        await self._before_put("put_from_stream")
        return await super().put_from_stream(container, key, reader, size, content_type)

    async def stat_object(self, container: str, key: str) -> ObjectInfo:
        self.calls.append("stat_object")
        self.stat_started.set()
        if self.block_stat:
            await self.release_stat.wait()
        if self.stat_error is not None:
            raise self.stat_error
        return await super().stat_object(container, key)

    @property
    def put_calls(self) -> list[str]:
        return [call for call in self.calls if call.startswith("put_")]


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture(autouse=True)
def _reset_backend_cache() -> None:
    reset_backends()


@pytest.fixture
def make_backend() -> type[RecordingBackend]:
    """Factory for backends with injected failures."""
    return RecordingBackend
