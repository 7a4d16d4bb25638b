"""Object store backends for Stowage.

Each backend implements the same capability set:
- put_from_path: upload a spooled file
- put_from_stream: upload an in-memory payload
- stat_object: fetch authoritative size, checksum and modification time

Available backends:
- Local filesystem (file:// and bare paths)
- In-memory (mem://)
- S3-compatible storage (MinIO, AWS S3)
- Google Cloud Storage
- Azure Blob Storage
"""

from stowage.storage.azure import AzureBackend
from stowage.storage.base import BackendAdapter, ObjectInfo
from stowage.storage.factory import backend_for, close_backends, get_backend, reset_backends
from stowage.storage.gcs import GcsBackend
from stowage.storage.local import LocalBackend
from stowage.storage.memory import MemoryBackend
from stowage.storage.s3 import S3Backend

__all__ = [
    "BackendAdapter",
    "ObjectInfo",
    "LocalBackend",
    "MemoryBackend",
    "S3Backend",
    "GcsBackend",
    "AzureBackend",
    "backend_for",
    "get_backend",
    "close_backends",
    "reset_backends",
]
