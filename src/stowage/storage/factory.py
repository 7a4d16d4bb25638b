"""Backend factory keyed by destination scheme."""

from __future__ import annotations

from stowage.config import Settings, settings
from stowage.core.destination import Destination
from stowage.errors import ConfigurationError
from stowage.storage.azure import AzureBackend
from stowage.storage.base import BackendAdapter
from stowage.storage.gcs import GcsBackend
from stowage.storage.local import LocalBackend
from stowage.storage.memory import MemoryBackend
from stowage.storage.s3 import S3Backend

SCHEME_ALIASES = {
    "s3": "s3",
    "minio": "s3",
    "gs": "gs",
    "gcs": "gs",
    "azure": "azure",
    "az": "azure",
    "file": "file",
    "mem": "mem",
}

_backends: dict[str, BackendAdapter] = {}


def get_backend(scheme: str, config: Settings | None = None) -> BackendAdapter:
    """Return a shared BackendAdapter for a destination scheme."""
    kind = SCHEME_ALIASES.get(scheme.lower())
    if kind is None:
        raise ConfigurationError(
            f"Unsupported destination scheme '{scheme}'. "
            f"Supported values: {', '.join(sorted(SCHEME_ALIASES))}."
        )

    if kind in _backends:
        return _backends[kind]

    config = config or settings
    backend: BackendAdapter
    if kind == "s3":
        backend = S3Backend(
            endpoint_url=config.s3_endpoint_url,
            region_name=config.s3_region,
            aws_access_key_id=config.s3_access_key_id,
            aws_secret_access_key=config.s3_secret_access_key,
        )
    elif kind == "gs":
        backend = GcsBackend(
            project=config.gcs_project,
            credentials_path=config.gcs_credentials_path,
        )
    elif kind == "azure":
        backend = AzureBackend(
            connection_string=config.azure_connection_string,
            account_url=config.azure_account_url,
            credential=config.azure_account_key or config.azure_sas_token,
        )
    elif kind == "mem":
        backend = MemoryBackend()
    else:
        backend = LocalBackend(base_path=config.local_root)

    _backends[kind] = backend
    return backend


def backend_for(destination: Destination, config: Settings | None = None) -> BackendAdapter:
    return get_backend(destination.scheme, config)


def reset_backends() -> None:
    """Drop cached backends (used by tests and after settings changes)."""
    _backends.clear()


async def close_backends() -> None:
    """Close cached backends and drop them from the cache."""
    backends = list(_backends.values())
    _backends.clear()
    for backend in backends:
        await backend.close()
