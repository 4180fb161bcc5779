"""Request-side models: parameter encoding, filter operations and query builders."""

from .encoding import encode, encode_filter, format_datetime, merge_params
from .operations import Operation, OperationKind, Operator, Reference
from .query import (
    MAX_LIMIT,
    AssetQuery,
    BaseQuery,
    ContentTypeQuery,
    EntryQuery,
    GlobalFieldQuery,
    TaxonomyQuery,
    TypedEntryQuery,
)

__all__ = [
    "MAX_LIMIT",
    "AssetQuery",
    "BaseQuery",
    "ContentTypeQuery",
    "EntryQuery",
    "GlobalFieldQuery",
    "Operation",
    "OperationKind",
    "Operator",
    "Reference",
    "TaxonomyQuery",
    "TypedEntryQuery",
    "encode",
    "encode_filter",
    "format_datetime",
    "merge_params",
]
