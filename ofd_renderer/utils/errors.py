"""Typed errors raised while reading and rendering OFD documents."""
from __future__ import annotations

from typing import Optional


class OfdError(Exception):
    """Base error for the package."""


class FatalFormatError(OfdError):
    """The archive lacks the descriptors needed to build a document."""


class ResourceMissError(OfdError):
    """A font or image id is not declared in the resource tables."""

    def __init__(self, kind: str, resource_id: str) -> None:
        super().__init__(f"{kind} resource not found: {resource_id!r}")
        self.kind = kind
        self.resource_id = resource_id


class ObjectRenderError(OfdError):
    """Drawing a single page object failed; the object is skipped."""

    def __init__(self, message: str, *, page_index: Optional[int] = None, object_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.page_index = page_index
        self.object_id = object_id


class SerializationError(OfdError):
    """Writing the finished PDF failed."""
