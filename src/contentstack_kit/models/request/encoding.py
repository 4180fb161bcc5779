"""Parameter encoding for the Content Delivery API.

Two renderings of the same nested value model (mappings, sequences,
scalars, dates) are provided:

- :func:`encode` flattens parameters into a deterministic, percent-encoded
  query string using bracket notation (``include[]=a``, ``only[BASE][]=b``).
- :func:`encode_filter` renders a filter tree as JSON, used verbatim as
  the ``query`` URI parameter.
"""

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import quote

# Structural keys that never belong in the query string
EXCLUDED_KEYS = frozenset({"query", "uid", "content_type"})

# Characters left unescaped in values; '&', '=', '+' and '#' are always escaped
_SAFE_VALUE_CHARS = "-._~!$'()*,;:@/?"
_SAFE_KEY_CHARS = _SAFE_VALUE_CHARS + "[]"


def format_datetime(value: date) -> str:
    """Render a date as ISO-8601 UTC truncated to whole seconds.

    Naive datetimes are treated as UTC. Plain dates render at midnight.

    Example:
        >>> format_datetime(datetime(2020, 3, 1, 17, 25, 20, 999))
        '2020-03-01T17:25:20Z'
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_scalar(value: Any) -> str:
    """Render a scalar value as query text.

    Raises:
        TypeError: If the value is not a supported scalar
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return format_scalar(value.value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return format_datetime(value)
    raise TypeError(f"Unsupported parameter value type: {type(value).__name__}")


def _escape(text: str, safe: str) -> str:
    return quote(text, safe=safe)


def _components(key: str, value: Any) -> list[tuple[str, str]]:
    if isinstance(value, Mapping):
        components: list[tuple[str, str]] = []
        for nested_key in sorted(value):
            components += _components(f"{key}[{nested_key}]", value[nested_key])
        return components

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        components = []
        for element in value:
            components += _components(f"{key}[]", element)
        return components

    return [(_escape(key, _SAFE_KEY_CHARS), _escape(format_scalar(value), _SAFE_VALUE_CHARS))]


def encode(params: Mapping[str, Any]) -> str:
    """Encode parameters into a canonical query string.

    Keys are visited in sorted order; ``query``, ``uid`` and ``content_type``
    are skipped.

    Args:
        params: Parameter mapping

    Returns:
        Query string without a leading ``?``

    Raises:
        TypeError: If a value of an unsupported type is present

    Example:
        >>> encode({"title": "Gold", "count": 3})
        'count=3&title=Gold'
        >>> encode({"include": ["author", "tags"]})
        'include[]=author&include[]=tags'
    """
    components: list[tuple[str, str]] = []
    for key in sorted(params):
        if key in EXCLUDED_KEYS:
            continue
        components += _components(key, params[key])
    return "&".join(f"{k}={v}" for k, v in components)


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return format_datetime(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Unsupported filter value type: {type(value).__name__}")


def encode_filter(params: Mapping[str, Any], *, pretty: bool = False) -> str:
    """Render a filter tree as JSON.

    Args:
        params: Filter mapping (field path -> constraint)
        pretty: Indent the output for logging

    Returns:
        JSON text

    Raises:
        TypeError: If a value of an unsupported type is present

    Example:
        >>> encode_filter({"price": {"$lt": 100}})
        '{"price":{"$lt":100}}'
    """
    if pretty:
        return json.dumps(params, default=_json_default, indent=2, sort_keys=True)
    return json.dumps(params, default=_json_default, separators=(",", ":"), sort_keys=True)


def merge_params(left: Mapping[str, Any], right: Mapping[str, Any]) -> dict[str, Any]:
    """Merge two parameter mappings; keys from ``right`` win."""
    result = dict(left)
    result.update(right)
    return result
