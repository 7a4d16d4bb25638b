"""Content type resolution for destination paths."""

from __future__ import annotations

import mimetypes
import posixpath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# mimetypes reports compression as an encoding; the stored bytes are the archive
ENCODING_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "br": "application/x-brotli",
    "compress": "application/x-compress",
}


def resolve_content_type(path: str, override: str | None = None) -> str:
    """Resolve the MIME type for a destination path.

    Args:
        path: Destination path or URI (only the final segment is inspected)
        override: Explicit content type; always wins when given

    Returns:
        The override, the type implied by the extension, or
        application/octet-stream when the extension is unknown.
    """
    if override:
        return override

    name = posixpath.basename(path.rstrip("/"))
    if not name:
        return DEFAULT_CONTENT_TYPE

    content_type, encoding = mimetypes.guess_type(name, strict=False)
    if encoding:
        return ENCODING_TYPES.get(encoding, DEFAULT_CONTENT_TYPE)
    return content_type or DEFAULT_CONTENT_TYPE
