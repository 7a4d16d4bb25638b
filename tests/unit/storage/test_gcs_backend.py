"""Unit tests for the GCS backend."""

from __future__ import annotations

import base64
import hashlib
import io
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, BinaryIO

import pytest

from stowage.errors import BackendError, ObjectNotFoundError
from stowage.storage.gcs import GcsBackend


class FakeGcsBlob:
    def __init__(self, store: dict[str, bytes], name: str, fail: bool = False) -> None:
        self._store = store
        self._fail = fail
        self.name = name
        self.content_type: str | None = None

    def upload_from_filename(self, filename: str, content_type: str | None = None) -> None:
        if self._fail:
            raise RuntimeError("503 backend unavailable")
        self._store[self.name] = Path(filename).read_bytes()
        self.content_type = content_type

    def upload_from_file(
        self, file_obj: BinaryIO, size: int | None = None, content_type: str | None = None
    ) -> None:
        if self._fail:
            raise RuntimeError("503 backend unavailable")
        self._store[self.name] = file_obj.read(size)
        self.content_type = content_type

    @property
    def size(self) -> int:
        return len(self._store[self.name])

    @property
    def md5_hash(self) -> str:
        return base64.b64encode(hashlib.md5(self._store[self.name]).digest()).decode()

    @property
    def updated(self) -> datetime:
        return datetime(2021, 6, 1, tzinfo=UTC)

    etag = "CJ+etag"


class FakeGcsBucket:
    def __init__(self, store: dict[str, bytes], fail: bool) -> None:
        self._store = store
        self._fail = fail

    def blob(self, name: str) -> FakeGcsBlob:
        return FakeGcsBlob(self._store, name, self._fail)

    def get_blob(self, name: str) -> FakeGcsBlob | None:
        if name not in self._store:
            return None
        return FakeGcsBlob(self._store, name)


class FakeGcsClient:
    def __init__(self, fail: bool = False) -> None:
        self.store: dict[str, bytes] = {}
        self.fail = fail

    def bucket(self, name: str) -> FakeGcsBucket:
        return FakeGcsBucket(self.store, self.fail)


def _backend(monkeypatch: pytest.MonkeyPatch, client: FakeGcsClient) -> GcsBackend:
    backend = GcsBackend(project="test-project")

    async def get_client() -> Any:
        return client

    monkeypatch.setattr(backend, "_get_client", get_client)
    return backend


@pytest.mark.asyncio
async def test_gcs_put_and_stat(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Upload from stream and path using a mocked GCS client."""
    client = FakeGcsClient()
    backend = _backend(monkeypatch, client)
    spool = tmp_path / "spool"
    spool.write_bytes(b"from-path")

    await backend.put_from_stream("bucket", "a.txt", io.BytesIO(b"from-stream"), 11, "text/plain")
    written = await backend.put_from_path("bucket", "b.txt", spool, "text/plain")

    assert written == 9
    assert client.store == {"a.txt": b"from-stream", "b.txt": b"from-path"}
    info = await backend.stat_object("bucket", "a.txt")
    assert info.size == 11
    assert info.checksum == hashlib.md5(b"from-stream").hexdigest()
    assert info.modified == datetime(2021, 6, 1, tzinfo=UTC)


@pytest.mark.asyncio
async def test_gcs_stat_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    """get_blob returning None means not found."""
    backend = _backend(monkeypatch, FakeGcsClient())

    with pytest.raises(ObjectNotFoundError):
        await backend.stat_object("bucket", "missing")


@pytest.mark.asyncio
async def test_gcs_upload_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """Client failures are wrapped in BackendError."""
    backend = _backend(monkeypatch, FakeGcsClient(fail=True))

    with pytest.raises(BackendError, match="503"):
        await backend.put_from_stream("bucket", "a", io.BytesIO(b"x"), 1, "text/plain")
