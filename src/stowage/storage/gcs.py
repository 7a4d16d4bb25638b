"""Google Cloud Storage backend."""

from __future__ import annotations

import asyncio
import base64
import binascii
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, BinaryIO

from stowage.errors import BackendError, ObjectNotFoundError
from stowage.storage.base import BackendAdapter, ObjectInfo


class GcsBackend(BackendAdapter):
    """GCS backend implementation.

    Uses google-cloud-storage with asyncio.to_thread for non-blocking I/O.
    Cancelling the awaiting task abandons the upload thread; GCS only
    publishes an object once its upload completes.
    """

    name = "gs"

    def __init__(
        self,
        project: str | None = None,
        credentials_path: str | None = None,
    ) -> None:
        self.project = project
        self.credentials_path = credentials_path
        self._client: Any | None = None

    async def _get_client(self) -> Any:
        """Get or create GCS client."""
        if self._client is None:
            from google.cloud import storage

            if self.credentials_path:
                self._client = storage.Client.from_service_account_json(
                    self.credentials_path, project=self.project
                )
            else:
                self._client = storage.Client(project=self.project)
        return self._client

    async def put_from_path(
        self,
        container: str,
        key: str,
        local_path: str | Path,
        content_type: str,
    ) -> int:
        client = await self._get_client()
        blob = client.bucket(container).blob(key)
        try:
            await asyncio.to_thread(
                blob.upload_from_filename, str(local_path), content_type=content_type
            )
        except Exception as e:
            raise BackendError(f"gcs upload failed: {e}", self.describe(container, key)) from e
        return Path(local_path).stat().st_size

    async def put_from_stream(
        self,
        container: str,
        key: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        client = await self._get_client()
        blob = client.bucket(container).blob(key)
        try:
            await asyncio.to_thread(
                blob.upload_from_file, reader, size=size, content_type=content_type
            )
        except Exception as e:
            raise BackendError(f"gcs upload failed: {e}", self.describe(container, key)) from e
        return size

    async def stat_object(self, container: str, key: str) -> ObjectInfo:
        client = await self._get_client()
        bucket = client.bucket(container)
        try:
            blob = await asyncio.to_thread(bucket.get_blob, key)
        except Exception as e:
            raise BackendError(f"gcs stat failed: {e}", self.describe(container, key)) from e

        if blob is None:
            raise ObjectNotFoundError(self.describe(container, key))

        return ObjectInfo(
            modified=blob.updated or datetime.now(UTC),
            checksum=_md5_hex(blob.md5_hash) or str(blob.etag or ""),
            size=int(blob.size or 0),
        )


def _md5_hex(md5_b64: str | None) -> str:
    """GCS reports MD5 base64-encoded; convert to the hex form buffers use."""
    if not md5_b64:
        return ""
    try:
        return base64.b64decode(md5_b64).hex()
    except (binascii.Error, ValueError):
        return ""
