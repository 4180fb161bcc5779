"""In-memory response cache.

Stores successful response bodies keyed by the full request URL, which
already includes every query parameter and the environment.
"""

import logging

logger = logging.getLogger(__name__)


class InMemoryResponseCache:
    """Response body cache living as long as the stack that owns it.

    Entries never expire; call :meth:`clear` to drop them.

    Example:
        >>> cache = InMemoryResponseCache()
        >>> cache.set("https://cdn.contentstack.io/v3/assets?environment=prod", b"{}")
        >>> cache.get("https://cdn.contentstack.io/v3/assets?environment=prod")
        b'{}'
    """

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}
        self._hit_count = 0

    def get(self, key: str) -> bytes | None:
        """Get a cached body, or ``None`` on a miss."""
        body = self._entries.get(key)
        if body is None:
            logger.debug(f"Cache miss: {key}")
            return None
        self._hit_count += 1
        logger.debug(f"Cache hit: {key}")
        return body

    def set(self, key: str, body: bytes) -> None:
        """Store a response body."""
        self._entries[key] = body

    def clear(self) -> None:
        """Drop all cached responses."""
        self._entries.clear()
        self._hit_count = 0
        logger.debug("Cleared response cache")

    @property
    def cache_size(self) -> int:
        """Number of cached responses."""
        return len(self._entries)

    @property
    def hit_count(self) -> int:
        """Number of lookups served from the cache."""
        return self._hit_count

    def __contains__(self, key: object) -> bool:
        return key in self._entries
