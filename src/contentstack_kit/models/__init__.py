"""Data models for contentstack-kit."""

from .config import ContentstackConfig, RetryConfig
from .enums import (
    AssetInclude,
    CachePolicy,
    ContentTypeInclude,
    EntryInclude,
    GlobalFieldInclude,
    PublishType,
    QueryOperator,
    Region,
    ResourceKind,
    ResponseSource,
    SortDirection,
    SyncState,
)

__all__ = [
    "AssetInclude",
    "CachePolicy",
    "ContentTypeInclude",
    "ContentstackConfig",
    "EntryInclude",
    "GlobalFieldInclude",
    "PublishType",
    "QueryOperator",
    "Region",
    "ResourceKind",
    "ResponseSource",
    "RetryConfig",
    "SortDirection",
    "SyncState",
]
