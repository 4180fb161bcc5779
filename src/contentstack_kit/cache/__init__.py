"""Response caching."""

from .response_cache import InMemoryResponseCache

__all__ = ["InMemoryResponseCache"]
