"""Dynamic field bag for untyped entries.

Entries decoded without a caller model keep their fields in a
:class:`FieldBag`: a plain ``dict`` with typed accessors that return
``None`` when a key is missing or holds a value of another type.
"""

from datetime import datetime
from typing import Any


class FieldBag(dict[str, Any]):
    """Mapping of field UID to JSON value with typed accessors.

    Example:
        >>> bag = FieldBag({"title": "Gold", "price": 12})
        >>> bag.get_str("title")
        'Gold'
        >>> bag.get_str("price") is None
        True
    """

    @property
    def uid(self) -> str | None:
        return self.get_str("uid")

    @property
    def title(self) -> str | None:
        return self.get_str("title")

    @property
    def content_type_uid(self) -> str | None:
        """Content type UID of a resolved reference, when the server sent one."""
        return self.get_str("_content_type_uid")

    def get_str(self, key: str) -> str | None:
        value = self.get(key)
        return value if isinstance(value, str) else None

    def get_int(self, key: str) -> int | None:
        value = self.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    def get_float(self, key: str) -> float | None:
        value = self.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    def get_bool(self, key: str) -> bool | None:
        value = self.get(key)
        return value if isinstance(value, bool) else None

    def get_list(self, key: str) -> list[Any] | None:
        value = self.get(key)
        return value if isinstance(value, list) else None

    def get_bag(self, key: str) -> "FieldBag | None":
        """Get a nested object as a :class:`FieldBag`."""
        value = self.get(key)
        if isinstance(value, FieldBag):
            return value
        if isinstance(value, dict):
            return FieldBag(value)
        return None

    def get_datetime(self, key: str) -> datetime | None:
        """Parse an ISO-8601 timestamp such as ``2020-03-01T17:25:20.000Z``."""
        value = self.get(key)
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    @classmethod
    def field_keys(cls) -> frozenset[str]:
        # A bag accepts every key
        return frozenset()

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> "FieldBag":
        return cls(fields)
