"""Azure Blob Storage backend."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, BinaryIO

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import ContentSettings

from stowage.errors import BackendError, ConfigurationError, ObjectNotFoundError
from stowage.storage.base import BackendAdapter, ObjectInfo


class AzureBackend(BackendAdapter):
    """Azure Blob Storage implementation using azure-storage-blob aio client."""

    name = "azure"

    def __init__(
        self,
        connection_string: str | None = None,
        account_url: str | None = None,
        credential: str | None = None,
    ) -> None:
        self.connection_string = connection_string
        self.account_url = account_url
        self.credential = credential
        self._client: Any | None = None

    async def _get_client(self) -> Any:
        """Get or create BlobServiceClient."""
        if self._client is None:
            from azure.storage.blob.aio import BlobServiceClient

            if self.connection_string:
                self._client = BlobServiceClient.from_connection_string(self.connection_string)
            elif self.account_url:
                self._client = BlobServiceClient(
                    account_url=self.account_url, credential=self.credential
                )
            else:
                raise ConfigurationError(
                    "Azure storage requires AZURE_STORAGE_CONNECTION_STRING or AZURE_ACCOUNT_URL"
                )

        return self._client

    async def put_from_path(
        self,
        container: str,
        key: str,
        local_path: str | Path,
        content_type: str,
    ) -> int:
        size = os.path.getsize(local_path)
        with open(local_path, "rb") as f:
            return await self.put_from_stream(container, key, f, size, content_type)

    async def put_from_stream(
        self,
        container: str,
        key: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        client = await self._get_client()
        blob_client = client.get_blob_client(container=container, blob=key)
        try:
            await blob_client.upload_blob(
                reader,
                length=size,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            raise BackendError(f"azure upload failed: {e}", self.describe(container, key)) from e
        return size

    async def stat_object(self, container: str, key: str) -> ObjectInfo:
        client = await self._get_client()
        blob_client = client.get_blob_client(container=container, blob=key)
        try:
            props = await blob_client.get_blob_properties()
        except ResourceNotFoundError as e:
            raise ObjectNotFoundError(self.describe(container, key)) from e
        except AzureError as e:
            raise BackendError(f"azure stat failed: {e}", self.describe(container, key)) from e

        content_md5 = getattr(props.content_settings, "content_md5", None)
        checksum = bytes(content_md5).hex() if content_md5 else str(props.etag or "").strip('"')
        return ObjectInfo(
            modified=props.last_modified or datetime.now(UTC),
            checksum=checksum,
            size=int(props.size or 0),
        )

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
