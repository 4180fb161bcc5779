"""Enumerations used across contentstack-kit."""

from enum import Enum, Flag, auto


class Region(str, Enum):
    """Data-center regions of the Content Delivery API."""

    US = "us"
    EU = "eu"
    AZURE_NA = "azure-na"
    AZURE_EU = "azure-eu"
    GCP_NA = "gcp-na"


class CachePolicy(str, Enum):
    """Source from which a fetch retrieves content.

    ``CACHE_THEN_NETWORK`` delivers two results for a single fetch when the
    cache holds a response: the cached one first, then the network one.
    """

    NETWORK_ONLY = "network_only"
    CACHE_ONLY = "cache_only"
    CACHE_ELSE_NETWORK = "cache_else_network"
    NETWORK_ELSE_CACHE = "network_else_cache"
    CACHE_THEN_NETWORK = "cache_then_network"


class ResponseSource(str, Enum):
    """Where a delivered response came from."""

    CACHE = "cache"
    NETWORK = "network"


class QueryOperator(str, Enum):
    """Filter operator keys of the Content Delivery API query language."""

    NE = "$ne"
    IN = "$in"
    NIN = "$nin"
    LT = "$lt"
    LTE = "$lte"
    GT = "$gt"
    GTE = "$gte"
    EXISTS = "$exists"
    REGEX = "$regex"
    EQ_BELOW = "$eq_below"
    BELOW = "$below"
    EQ_ABOVE = "$eq_above"
    ABOVE = "$above"

    # Logical
    AND = "$and"
    OR = "$or"


class SortDirection(str, Enum):
    """Sort direction; the value is the URI parameter key."""

    ASC = "asc"
    DESC = "desc"


class ResourceKind(str, Enum):
    """Kinds of resources served by the Content Delivery API.

    The value is the endpoint path component.
    """

    CONTENT_TYPE = "content_types"
    ENTRY = "entries"
    ASSET = "assets"
    GLOBAL_FIELD = "global_fields"
    TAXONOMY = "taxonomies"
    SYNC = "stacks/sync"

    @property
    def envelope_keys(self) -> tuple[str, str]:
        """Collection and singular envelope keys for this resource kind."""
        return _ENVELOPE_KEYS[self]


_ENVELOPE_KEYS: dict[ResourceKind, tuple[str, str]] = {
    ResourceKind.CONTENT_TYPE: ("content_types", "content_type"),
    ResourceKind.ENTRY: ("entries", "entry"),
    ResourceKind.ASSET: ("assets", "asset"),
    ResourceKind.GLOBAL_FIELD: ("global_fields", "global_field"),
    ResourceKind.TAXONOMY: ("entries", "entry"),
    ResourceKind.SYNC: ("items", "item"),
}


class EntryInclude(Flag):
    """Inclusion flags for entry queries."""

    COUNT = auto()
    UNPUBLISHED = auto()
    CONTENT_TYPE = auto()
    GLOBAL_FIELD = auto()
    REF_CONTENT_TYPE_UID = auto()
    FALLBACK = auto()
    EMBEDDED_ITEMS = auto()
    METADATA = auto()
    ALL = (
        COUNT
        | UNPUBLISHED
        | CONTENT_TYPE
        | GLOBAL_FIELD
        | REF_CONTENT_TYPE_UID
        | FALLBACK
        | EMBEDDED_ITEMS
        | METADATA
    )


class AssetInclude(Flag):
    """Inclusion flags for asset queries."""

    COUNT = auto()
    RELATIVE_URL = auto()
    DIMENSION = auto()
    FALLBACK = auto()
    METADATA = auto()
    ALL = COUNT | RELATIVE_URL | DIMENSION | FALLBACK | METADATA


class ContentTypeInclude(Flag):
    """Inclusion flags for content type queries."""

    COUNT = auto()
    GLOBAL_FIELDS = auto()
    ALL = COUNT | GLOBAL_FIELDS


class GlobalFieldInclude(Flag):
    """Inclusion flags for global field queries."""

    GLOBAL_FIELD_SCHEMA = auto()
    BRANCH = auto()
    ALL = GLOBAL_FIELD_SCHEMA | BRANCH


class PublishType(str, Enum):
    """Change-event types that a sync can be restricted to."""

    ASSET_PUBLISHED = "asset_published"
    ASSET_UNPUBLISHED = "asset_unpublished"
    ASSET_DELETED = "asset_deleted"
    ENTRY_PUBLISHED = "entry_published"
    ENTRY_UNPUBLISHED = "entry_unpublished"
    ENTRY_DELETED = "entry_deleted"
    CONTENT_TYPE_DELETED = "content_type_deleted"


class SyncState(str, Enum):
    """Position of a sync cursor in the sync protocol."""

    INIT = "init"
    RESUMING = "resuming"
    PAGINATING = "paginating"
    TERMINAL = "terminal"
