"""Base backend adapter interface.

Defines the capability set an object writer needs from a remote store:
put from a local path, put from a stream, and stat.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO


@dataclass
class ObjectInfo:
    """Authoritative object metadata as reported by a backend."""

    modified: datetime
    checksum: str
    size: int


class BackendAdapter(ABC):
    """Abstract base class for object store backends.

    Adapters hold no per-object state and may be shared by many writers.
    All methods are coroutines; cancelling the awaiting task interrupts
    the call.
    """

    name: str = "backend"

    # Chunk size for streaming reads and copies
    CHUNK_SIZE: int = 64 * 1024

    @abstractmethod
    async def put_from_path(
        self,
        container: str,
        key: str,
        local_path: str | Path,
        content_type: str,
    ) -> int:
        """Upload a local file to container/key.

        Args:
            container: Bucket or container name
            key: Object key
            local_path: File to upload
            content_type: MIME type stored with the object

        Returns:
            Number of bytes written

        Raises:
            BackendError: If the upload fails
        """
        ...

    @abstractmethod
    async def put_from_stream(
        self,
        container: str,
        key: str,
        reader: BinaryIO,
        size: int,
        content_type: str,
    ) -> int:
        """Upload ``size`` bytes read from ``reader`` to container/key.

        Returns:
            Number of bytes written

        Raises:
            BackendError: If the upload fails
        """
        ...

    @abstractmethod
    async def stat_object(self, container: str, key: str) -> ObjectInfo:
        """Fetch authoritative metadata for container/key.

        Raises:
            ObjectNotFoundError: If the object does not exist
            BackendError: On any other failure
        """
        ...

    async def close(self) -> None:
        """Release connections held by the adapter."""
        return None

    def describe(self, container: str, key: str) -> str:
        """Human-readable location used in errors and logs."""
        return f"{self.name}://{container}/{key}"

    @staticmethod
    def compute_hash(content: bytes) -> str:
        """Compute the MD5 hex digest used as object checksum."""
        return hashlib.md5(content, usedforsecurity=False).hexdigest()
