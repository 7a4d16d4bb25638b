"""Core writer components: destinations, content types and metadata."""

from stowage.core.content_type import DEFAULT_CONTENT_TYPE, resolve_content_type
from stowage.core.destination import Destination, parse_destination
from stowage.core.metadata import ObjectMetadata

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "Destination",
    "ObjectMetadata",
    "parse_destination",
    "resolve_content_type",
]
