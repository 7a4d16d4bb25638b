"""Object metadata produced by a committed writer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

import orjson

from stowage.core.content_type import DEFAULT_CONTENT_TYPE


@dataclass
class ObjectMetadata:
    """Verifiable record describing a written object.

    ``created`` stays None until a commit fully succeeded (transfer and
    stat). Before that, size and checksum describe the local buffer.
    """

    path: str
    size: int = 0
    checksum: str = ""
    created: datetime | None = None
    line_count: int = 0
    content_type: str = DEFAULT_CONTENT_TYPE

    @property
    def is_committed(self) -> bool:
        return self.created is not None

    def copy(self) -> "ObjectMetadata":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "size": self.size,
            "checksum": self.checksum,
            "created": self.created.isoformat() if self.created else None,
            "line_count": self.line_count,
            "content_type": self.content_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectMetadata":
        created = data.get("created")
        return cls(
            path=data["path"],
            size=int(data.get("size", 0)),
            checksum=data.get("checksum", ""),
            created=datetime.fromisoformat(created) if created else None,
            line_count=int(data.get("line_count", 0)),
            content_type=data.get("content_type") or DEFAULT_CONTENT_TYPE,
        )

    def to_json(self) -> bytes:
        """Serialize to JSON bytes for downstream announcement."""
        return orjson.dumps(self.to_dict())

    @classmethod
    def from_json(cls, data: bytes | str) -> "ObjectMetadata":
        return cls.from_dict(orjson.loads(data))
