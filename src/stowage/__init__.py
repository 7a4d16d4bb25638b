"""Stowage: atomic buffered writers for object stores.

Bytes are staged locally (in memory or in a spool file) and only
committed to the destination store when the writer is closed, so a
destination never holds a partially written object.

Usage:
    from stowage import open_writer

    async with open_writer("s3://bucket/2020/01/01/data.json.gz") as w:
        w.write_line(b'{"a": 1}')
    print(w.stats().to_json())
"""

from stowage.config import Settings, WriterOptions, settings
from stowage.core.destination import Destination, parse_destination
from stowage.core.metadata import ObjectMetadata
from stowage.core.writer import ObjectWriter, WriterState, open_writer
from stowage.errors import (
    BackendError,
    CommitAbortedError,
    ConfigurationError,
    ObjectNotFoundError,
    StagingError,
    StowageError,
    UnverifiedCommitError,
    WriterClosedError,
)

__version__ = "0.1.0"

__all__ = [
    "Destination",
    "ObjectMetadata",
    "ObjectWriter",
    "Settings",
    "WriterOptions",
    "WriterState",
    "open_writer",
    "parse_destination",
    "settings",
    # Errors
    "BackendError",
    "CommitAbortedError",
    "ConfigurationError",
    "ObjectNotFoundError",
    "StagingError",
    "StowageError",
    "UnverifiedCommitError",
    "WriterClosedError",
]
