"""contentstack-kit: A modern Python client for the Contentstack Content Delivery API.

This package provides:
- Synchronous and asynchronous stacks built on httpx
- Fluent query builders for entries, assets, content types, global fields
  and taxonomies
- Reference resolution and typed decoding with Pydantic models
- Incremental sync with resumable cursors
- Response caching policies and automatic retry
"""

from .__version__ import __version__
from .client import AsyncStack, Stack
from .config_provider import ConfigFactory, create_config, load_config
from .exceptions import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    CacheError,
    ConfigurationError,
    ContentstackError,
    DecodeError,
    ErrorInfo,
    HTTPStatusError,
    InvalidUIDError,
    ItemDecodeError,
    NotFoundError,
    RateLimitError,
    SchemaMismatchError,
    ServerError,
    SyncError,
    TransportError,
    UnparseableResponseError,
    ValidationError,
)
from .models import (
    AssetInclude,
    CachePolicy,
    ContentstackConfig,
    ContentTypeInclude,
    EntryInclude,
    GlobalFieldInclude,
    PublishType,
    Region,
    ResponseSource,
    RetryConfig,
    SyncState,
)
from .models.request import (
    AssetQuery,
    ContentTypeQuery,
    EntryQuery,
    GlobalFieldQuery,
    Operation,
    Operator,
    Reference,
    TaxonomyQuery,
    TypedEntryQuery,
)
from .models.response import (
    AssetModel,
    ContentstackModel,
    ContentstackResponse,
    ContentTypeModel,
    EntryDecodable,
    EntryModel,
    FieldBag,
    GlobalFieldModel,
    ModelRegistry,
    ResponseMaterializer,
    SyncItem,
    TaxonomyModel,
)
from .operations.sync import SyncPage, SyncStack, SyncType, sync_pages, sync_pages_async
from .protocols import (
    AsyncHTTPClient,
    AuthProvider,
    ConfigProvider,
    HTTPClient,
    ResponseCache,
    ResponseParser,
)

__all__ = [
    "__version__",
    # Stacks
    "Stack",
    "AsyncStack",
    # Configuration
    "ContentstackConfig",
    "RetryConfig",
    "ConfigFactory",
    "create_config",
    "load_config",
    "Region",
    "CachePolicy",
    # Queries
    "EntryQuery",
    "TypedEntryQuery",
    "AssetQuery",
    "ContentTypeQuery",
    "GlobalFieldQuery",
    "TaxonomyQuery",
    "Operation",
    "Operator",
    "Reference",
    "EntryInclude",
    "AssetInclude",
    "ContentTypeInclude",
    "GlobalFieldInclude",
    # Responses
    "ContentstackResponse",
    "ResponseSource",
    "ResponseMaterializer",
    "FieldBag",
    "ContentstackModel",
    "EntryDecodable",
    "ModelRegistry",
    "EntryModel",
    "AssetModel",
    "ContentTypeModel",
    "GlobalFieldModel",
    "TaxonomyModel",
    "SyncItem",
    # Sync
    "SyncStack",
    "SyncType",
    "SyncPage",
    "SyncState",
    "PublishType",
    "sync_pages",
    "sync_pages_async",
    # Protocols (for dependency injection)
    "AuthProvider",
    "ConfigProvider",
    "HTTPClient",
    "AsyncHTTPClient",
    "ResponseParser",
    "ResponseCache",
    # Exceptions
    "ContentstackError",
    "ConfigurationError",
    "TransportError",
    "HTTPStatusError",
    "APIError",
    "ErrorInfo",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "DecodeError",
    "UnparseableResponseError",
    "SchemaMismatchError",
    "ItemDecodeError",
    "SyncError",
    "InvalidUIDError",
    "CacheError",
]
