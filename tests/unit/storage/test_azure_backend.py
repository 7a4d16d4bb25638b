"""Unit tests for the Azure backend."""

from __future__ import annotations

import hashlib
import io
from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace
from typing import Any, BinaryIO

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from stowage.errors import BackendError, ConfigurationError, ObjectNotFoundError
from stowage.storage.azure import AzureBackend


class FakeAzureBlobClient:
    def __init__(self, store: dict[str, tuple[bytes, str]], name: str, fail: bool) -> None:
        self._store = store
        self._name = name
        self._fail = fail

    async def upload_blob(self, data: BinaryIO, length: int, **kwargs: Any) -> None:
        if self._fail:
            raise HttpResponseError(message="throttled")
        content_type = kwargs["content_settings"].content_type
        self._store[self._name] = (data.read(length), content_type)

    async def get_blob_properties(self) -> SimpleNamespace:
        if self._name not in self._store:
            raise ResourceNotFoundError(message="blob not found")
        data, content_type = self._store[self._name]
        return SimpleNamespace(
            last_modified=datetime(2022, 2, 2, tzinfo=UTC),
            etag='"0x8D"',
            size=len(data),
            content_settings=SimpleNamespace(
                content_type=content_type,
                content_md5=bytearray(hashlib.md5(data).digest()),
            ),
        )


class FakeAzureServiceClient:
    def __init__(self, fail: bool = False) -> None:
        self.store: dict[str, tuple[bytes, str]] = {}
        self.fail = fail

    def get_blob_client(self, container: str, blob: str) -> FakeAzureBlobClient:
        return FakeAzureBlobClient(self.store, f"{container}/{blob}", self.fail)


def _backend(monkeypatch: pytest.MonkeyPatch, client: FakeAzureServiceClient) -> AzureBackend:
    backend = AzureBackend(connection_string="UseDevelopmentStorage=true")

    async def get_client() -> Any:
        return client

    monkeypatch.setattr(backend, "_get_client", get_client)
    return backend


@pytest.mark.asyncio
async def test_azure_put_and_stat(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Upload from stream and path using a mocked Azure client."""
    client = FakeAzureServiceClient()
    backend = _backend(monkeypatch, client)
    spool = tmp_path / "spool"
    spool.write_bytes(b"spooled-bytes")

    await backend.put_from_stream("container", "a.json", io.BytesIO(b"{}"), 2, "application/json")
    written = await backend.put_from_path("container", "b.bin", spool, "application/octet-stream")

    assert written == len(b"spooled-bytes")
    assert client.store["container/a.json"] == (b"{}", "application/json")
    info = await backend.stat_object("container", "b.bin")
    assert info.size == len(b"spooled-bytes")
    assert info.checksum == hashlib.md5(b"spooled-bytes").hexdigest()
    assert info.modified == datetime(2022, 2, 2, tzinfo=UTC)


@pytest.mark.asyncio
async def test_azure_stat_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    """ResourceNotFoundError maps to ObjectNotFoundError."""
    backend = _backend(monkeypatch, FakeAzureServiceClient())

    with pytest.raises(ObjectNotFoundError):
        await backend.stat_object("container", "missing")


@pytest.mark.asyncio
async def test_azure_upload_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """Service errors are wrapped in BackendError."""
    backend = _backend(monkeypatch, FakeAzureServiceClient(fail=True))

    with pytest.raises(BackendError, match="throttled"):
        await backend.put_from_stream("container", "a", io.BytesIO(b"x"), 1, "text/plain")


@pytest.mark.asyncio
async def test_azure_requires_credentials() -> None:
    """Without a connection string or account URL the client cannot be built."""
    backend = AzureBackend()

    with pytest.raises(ConfigurationError):
        await backend.put_from_stream("container", "a", io.BytesIO(b"x"), 1, "text/plain")
