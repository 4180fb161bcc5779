"""Materialized response container."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from ..enums import ResponseSource

T = TypeVar("T")


@dataclass
class ContentstackResponse(Generic[T]):
    """Decoded page of results.

    Attributes:
        items: Decoded items in server order
        count: Total number of matches, when ``include_count`` was requested
        skip: Requested offset
        limit: Requested page size
        fields: Sibling data of the envelope (e.g. ``content_type`` when it
            was included)
        source: Whether the response was served from the cache or the network
    """

    items: list[T] = field(default_factory=list)
    count: int | None = None
    skip: int | None = None
    limit: int | None = None
    fields: dict[str, Any] = field(default_factory=dict)
    source: ResponseSource = ResponseSource.NETWORK

    @property
    def first(self) -> T | None:
        """First item, or ``None`` for an empty page."""
        return self.items[0] if self.items else None

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self.items)
