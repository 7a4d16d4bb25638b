"""S3-compatible backend.

Supports:
- AWS S3
- MinIO
- Any S3-compatible object storage
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from stowage.errors import BackendError, ObjectNotFoundError
from stowage.storage.base import BackendAdapter, ObjectInfo

if TYPE_CHECKING:
    import aioboto3

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

# Largest single PUT S3 accepts; below it the ETag is the MD5 of the object
SINGLE_PUT_LIMIT = 5 * 1024 * 1024 * 1024


class S3Backend(BackendAdapter):
    """S3-compatible backend implementation.

    Uses aioboto3 managed transfers. Uploads up to ``multipart_threshold``
    are single PUTs, so HEAD reports their MD5 as ETag; larger uploads are
    multipart and report an ETag of the form ``<hash>-<parts>``.

    Configuration via:
    - endpoint_url: For non-AWS S3-compatible services
    - region_name: AWS region
    - credentials: via AWS SDK defaults or explicit aws_access_key_id/secret_access_key
    """

    name = "s3"

    def __init__(
        self,
        endpoint_url: str | None = None,
        region_name: str = "us-east-1",
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        multipart_threshold: int = SINGLE_PUT_LIMIT,
    ):
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key
        self.transfer_config = TransferConfig(multipart_threshold=multipart_threshold)
        self._session: "aioboto3.Session | None" = None

    async def _get_session(self) -> "aioboto3.Session":
        """Get or create aioboto3 session."""
        if self._session is None:
            import aioboto3

            self._session = aioboto3.Session(
                aws_access_key_id=self.aws_access_key_id,
                aws_secret_access_key=self.aws_secret_access_key,
                region_name=self.region_name,
            )
        return self._session

    async def put_from_path(
        self,
        container: str,
        key: str,
        local_path: str | Path,
        content_type: str,
    ) -> int:
        """Upload a spool file with a managed transfer."""
        session = await self._get_session()
        try:
            async with session.client("s3", endpoint_url=self.endpoint_url) as s3:
                await s3.upload_file(
                    str(local_path),
                    container,
                    key,
                    ExtraArgs={"ContentType": content_type},
                    Config=self.transfer_config,
                )
        except (BotoCoreError, ClientError) as e:
            raise BackendError(f"s3 upload failed: {e}", self.describe(container, key)) from e

        return Path(local_path).stat().st_size

    async def put_from_stream(
        self,
        container: str,
        key: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        """Upload an in-memory payload."""
        session = await self._get_session()
        try:
            async with session.client("s3", endpoint_url=self.endpoint_url) as s3:
                await s3.upload_fileobj(
                    reader,
                    container,
                    key,
                    ExtraArgs={"ContentType": content_type},
                    Config=self.transfer_config,
                )
        except (BotoCoreError, ClientError) as e:
            raise BackendError(f"s3 upload failed: {e}", self.describe(container, key)) from e

        return size

    async def stat_object(self, container: str, key: str) -> ObjectInfo:
        """Stat an object with HEAD."""
        session = await self._get_session()
        try:
            async with session.client("s3", endpoint_url=self.endpoint_url) as s3:
                response = await s3.head_object(Bucket=container, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in NOT_FOUND_CODES:
                raise ObjectNotFoundError(self.describe(container, key)) from e
            raise BackendError(f"s3 stat failed: {e}", self.describe(container, key)) from e
        except BotoCoreError as e:
            raise BackendError(f"s3 stat failed: {e}", self.describe(container, key)) from e

        modified = response.get("LastModified") or datetime.now(UTC)
        return ObjectInfo(
            modified=modified,
            checksum=str(response.get("ETag", "")).strip('"'),
            size=int(response.get("ContentLength", 0)),
        )
