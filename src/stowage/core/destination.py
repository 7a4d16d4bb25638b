"""Destination path parsing.

A destination is either a URI of the form ``scheme://container/key``
(e.g. ``s3://bucket/2020/01/01/data.json.gz``) or a local filesystem
path. Local paths (bare or ``file://``) have an empty container and the
full path as key.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from stowage.errors import ConfigurationError

LOCAL_SCHEME = "file"


@dataclass(frozen=True)
class Destination:
    """A parsed (container, key) pair plus the scheme it came from."""

    scheme: str
    container: str
    key: str

    @property
    def is_local(self) -> bool:
        return self.scheme == LOCAL_SCHEME

    @property
    def extension(self) -> str:
        """Final suffix, lower-cased (``.gz`` for ``data.json.gz``)."""
        return PurePosixPath(self.key).suffix.lower()

    @property
    def uri(self) -> str:
        if self.is_local:
            return self.key
        return f"{self.scheme}://{self.container}/{self.key}"

    def __str__(self) -> str:
        return self.uri


def parse_destination(path: str) -> Destination:
    """Parse a destination path into scheme, container and key.

    Raises:
        ConfigurationError: If the path is empty or malformed
    """
    if not path or not path.strip():
        raise ConfigurationError("destination path is empty")

    if "://" not in path:
        return _local(path, path)

    scheme, _, rest = path.partition("://")
    scheme = scheme.lower()
    if not scheme or not scheme.replace("+", "").replace("-", "").isalnum():
        raise ConfigurationError(f"invalid scheme in destination: {path}")

    if scheme == LOCAL_SCHEME:
        return _local(rest, path)

    parts = rest.split("/", 1)
    container = parts[0]
    key = parts[1] if len(parts) > 1 else ""
    if not container:
        raise ConfigurationError(f"destination has no container: {path}")
    if not key:
        raise ConfigurationError(f"destination has no object key: {path}")
    if key.endswith("/"):
        raise ConfigurationError(f"destination key must not be a directory: {path}")

    return Destination(scheme=scheme, container=container, key=key)


def _local(key: str, original: str) -> Destination:
    if not key or key.endswith("/"):
        raise ConfigurationError(f"destination is not a file path: {original}")
    return Destination(scheme=LOCAL_SCHEME, container="", key=key)
