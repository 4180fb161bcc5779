"""Fluent query builders for the Content Delivery API.

A query accumulates two maps:

- ``uri_parameters``: rendered into the URL query string
  (``locale``, ``skip``, ``limit``, ``include[]``, ``only[BASE][]``, ...)
- ``filter_parameters``: a MongoDB-style filter tree rendered as JSON
  into the ``query`` URI parameter

All builder methods mutate the query in place and return it for chaining.
A query is owned by a single writer; concurrent mutation of the same
instance is not supported.

Example:
    >>> query = (stack.content_type("product").entry().query()
    ...     .where("price", Operation.is_less_than(100))
    ...     .include_reference(["brand"])
    ...     .order_by_descending("created_at")
    ...     .limit(25))
    >>> response = query.find()
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from ...exceptions import ConfigurationError
from ..enums import (
    AssetInclude,
    CachePolicy,
    ContentTypeInclude,
    EntryInclude,
    GlobalFieldInclude,
    ResourceKind,
    SortDirection,
)
from .encoding import encode_filter
from .operations import Operation, Operator, Reference

if TYPE_CHECKING:
    from ...client.base import BaseStack
    from ..response.decodable import EntryDecodable

logger = logging.getLogger(__name__)

MAX_LIMIT = 1000
BASE_PROJECTION = "BASE"
MANDATORY_FIELDS = ("locale", "title")

_MISSING = object()


class BaseQuery:
    """Filters, pagination, ordering and raw parameters common to every resource."""

    resource_kind: ClassVar[ResourceKind]

    def __init__(
        self,
        stack: BaseStack | None = None,
        *,
        cache_policy: CachePolicy | None = None,
        model: type[Any] | None = None,
    ) -> None:
        """Initialize an empty query.

        Args:
            stack: Stack that executes the query; only needed for ``find``
            cache_policy: Per-query cache policy (defaults to the stack's)
            model: Decodable model for the result items
        """
        self._stack = stack
        self.cache_policy = cache_policy
        self.model = model
        self.uri_parameters: dict[str, Any] = {}
        self.filter_parameters: dict[str, Any] = {}
        self.headers: dict[str, str] = {}

    # Endpoint binding

    @property
    def path(self) -> str:
        """Endpoint path relative to the versioned base URL."""
        return self.resource_kind.value

    @property
    def included_references(self) -> list[str]:
        """Reference fields requested for expansion (none for this resource)."""
        return []

    # Filtering

    def where(self, field: str, operation: Operation) -> BaseQuery:
        """Install a filter constraint on ``field``.

        ``equals`` stores the bare value. Any other operation is stored
        under its operator key; different operators on the same field
        coexist while the same operator overwrites its previous value.
        An equality and operators never combine on one field: ``equals``
        replaces the field's operators, and an operator installed after
        ``equals`` replaces the equality.

        Args:
            field: Field path (dot notation for nested fields)
            operation: Filter operation

        Returns:
            The query, for chaining
        """
        if operation.operator is None:
            self.filter_parameters[field] = operation.wire_value
            return self

        existing = self.filter_parameters.get(field)
        if isinstance(existing, dict) and all(str(k).startswith("$") for k in existing):
            constraint = dict(existing)
            constraint.update(operation.wire_value)
        else:
            constraint = operation.wire_value
        self.filter_parameters[field] = constraint
        return self

    def operator(self, operator: Operator) -> BaseQuery:
        """Combine sub-query filters with ``$and`` / ``$or``."""
        self.filter_parameters[operator.key] = operator.value
        return self

    def reference_operator(self, field: str, reference: Reference) -> BaseQuery:
        """Filter on a reference field by membership in a sub-query's results."""
        self.filter_parameters[field] = {reference.key: reference.value}
        return self

    def add_query(self, key: str | Mapping[str, Any], value: Any = _MISSING) -> BaseQuery:
        """Merge raw key/value pairs into the filter tree (later wins).

        Accepts either ``add_query(key, value)`` or ``add_query({key: value})``.
        """
        self.filter_parameters.update(_as_mapping(key, value))
        return self

    # URI parameters

    def add_uri_param(self, key: str | Mapping[str, Any], value: Any = _MISSING) -> BaseQuery:
        """Merge raw key/value pairs into the URI parameters (later wins)."""
        self.uri_parameters.update(_as_mapping(key, value))
        return self

    def add_header(self, name: str, value: str) -> BaseQuery:
        """Send an additional HTTP header with this query."""
        self.headers[name] = value
        return self

    def skip(self, count: int) -> BaseQuery:
        """Skip the first ``count`` results.

        Raises:
            ConfigurationError: If ``count`` is negative
        """
        if count < 0:
            raise ConfigurationError(f"skip must be non-negative, got {count}")
        self.uri_parameters["skip"] = count
        return self

    def limit(self, count: int) -> BaseQuery:
        """Return at most ``count`` results.

        Raises:
            ConfigurationError: If ``count`` is not between 1 and 1000
        """
        if count < 1 or count > MAX_LIMIT:
            raise ConfigurationError(
                f"limit must be between 1 and {MAX_LIMIT}, got {count}",
                details={"limit": count, "max_limit": MAX_LIMIT},
            )
        self.uri_parameters["limit"] = count
        return self

    def order_by(self, key: str, direction: SortDirection = SortDirection.ASC) -> BaseQuery:
        """Set the single active sort, replacing any previous one."""
        self.uri_parameters.pop(SortDirection.ASC.value, None)
        self.uri_parameters.pop(SortDirection.DESC.value, None)
        self.uri_parameters[direction.value] = key
        return self

    def order_by_ascending(self, key: str) -> BaseQuery:
        """Sort results ascending by ``key``."""
        return self.order_by(key, SortDirection.ASC)

    def order_by_descending(self, key: str) -> BaseQuery:
        """Sort results descending by ``key``."""
        return self.order_by(key, SortDirection.DESC)

    # Rendering

    def to_params(self) -> dict[str, Any]:
        """Render all parameters for the request.

        The filter tree, when present, is rendered as JSON under ``query``.
        """
        params = dict(self.uri_parameters)
        if self.filter_parameters:
            params["query"] = encode_filter(self.filter_parameters)
        return params

    # Execution

    def _require_stack(self) -> BaseStack:
        if self._stack is None:
            raise ConfigurationError("Query is not bound to a stack")
        return self._stack

    def find(self) -> Any:
        """Execute the query with a single GET request.

        Returns a ``ContentstackResponse`` from a ``Stack`` or an awaitable
        of one from an ``AsyncStack``.
        """
        return self._require_stack().find(self)

    def find_iter(self) -> Any:
        """Execute the query and yield every delivered response.

        Yields twice under ``CachePolicy.CACHE_THEN_NETWORK`` when the
        cache holds a response. Returns an async iterator from an
        ``AsyncStack``.
        """
        return self._require_stack().find_iter(self)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(path={self.path!r}, "
            f"uri_parameters={self.uri_parameters!r}, "
            f"filter_parameters={self.filter_parameters!r})"
        )


class EntryQuery(BaseQuery):
    """Query over the entries of a content type."""

    resource_kind = ResourceKind.ENTRY

    def __init__(
        self,
        stack: BaseStack | None = None,
        *,
        content_type_uid: str | None = None,
        cache_policy: CachePolicy | None = None,
        model: type[Any] | None = None,
    ) -> None:
        if self.resource_kind == ResourceKind.ENTRY and not content_type_uid:
            raise ConfigurationError("Please provide ContentType uid")
        super().__init__(stack, cache_policy=cache_policy, model=model)
        self.content_type_uid = content_type_uid
        self.include_flags = EntryInclude(0)
        self._included_references: list[str] = []

    @property
    def path(self) -> str:
        return f"{ResourceKind.CONTENT_TYPE.value}/{self.content_type_uid}/entries"

    @property
    def included_references(self) -> list[str]:
        return list(self._included_references)

    def _union_projection(self, parameter: str, key: str, fields: Iterable[str]) -> None:
        projection: dict[str, list[str]] = {
            k: list(v) for k, v in self.uri_parameters.get(parameter, {}).items()
        }
        current = projection.setdefault(key, [])
        for field in fields:
            if field not in current:
                current.append(field)
        self.uri_parameters[parameter] = projection

    def locale(self, code: str) -> EntryQuery:
        """Fetch entries of a specific locale."""
        self.uri_parameters["locale"] = code
        return self

    def only(self, fields: Iterable[str]) -> EntryQuery:
        """Return only the given top-level fields.

        ``locale`` and ``title`` are always included so that entries remain
        decodable. Repeated calls add to the projection.
        """
        self._union_projection("only", BASE_PROJECTION, [*fields, *MANDATORY_FIELDS])
        return self

    def except_(self, fields: Iterable[str]) -> EntryQuery:
        """Exclude the given top-level fields.

        ``locale`` and ``title`` are never excluded. Repeated calls add to the
        projection.
        """
        excluded = [f for f in fields if f not in MANDATORY_FIELDS]
        self._union_projection("except", BASE_PROJECTION, excluded)
        return self

    def include_reference(self, fields: Iterable[str]) -> EntryQuery:
        """Expand the given reference fields in the response.

        Repeated calls add to the list, keeping first-appearance order
        without duplicates. Dot notation selects nested references.
        """
        for field in fields:
            if field not in self._included_references:
                self._included_references.append(field)
        self.uri_parameters["include"] = list(self._included_references)
        return self

    def include_reference_field(
        self,
        field: str,
        *,
        only: Iterable[str] | None = None,
        except_: Iterable[str] | None = None,
    ) -> EntryQuery:
        """Expand a reference field and project its fields.

        Args:
            field: Reference field UID
            only: Fields of the referenced entries to return
            except_: Fields of the referenced entries to omit

        Returns:
            The query, for chaining
        """
        self.include_reference([field])
        if only:
            self._union_projection("only", field, only)
        if except_:
            self._union_projection("except", field, except_)
        return self

    def include(self, flags: EntryInclude) -> EntryQuery:
        """Request additional data in the response.

        Flags accumulate across calls.
        """
        self.include_flags |= flags
        active = self.include_flags
        params = self.uri_parameters

        if EntryInclude.COUNT in active:
            params["include_count"] = True
        if EntryInclude.UNPUBLISHED in active:
            params["include_unpublished"] = True
        if EntryInclude.GLOBAL_FIELD in active:
            params["include_content_type"] = True
            params["include_global_field_schema"] = True
        elif EntryInclude.CONTENT_TYPE in active:
            params["include_content_type"] = True
            params["include_global_field_schema"] = False
        if EntryInclude.REF_CONTENT_TYPE_UID in active:
            params["include_reference_content_type_uid"] = True
        if EntryInclude.FALLBACK in active:
            params["include_fallback"] = True
        if EntryInclude.EMBEDDED_ITEMS in active:
            params["include_embedded_items"] = [BASE_PROJECTION]
        if EntryInclude.METADATA in active:
            params["include_metadata"] = True
        return self

    def include_count(self) -> EntryQuery:
        return self.include(EntryInclude.COUNT)

    def include_content_type(self) -> EntryQuery:
        return self.include(EntryInclude.CONTENT_TYPE)

    def include_fallback(self) -> EntryQuery:
        """Ask the server to fall back to the master locale for missing localizations."""
        return self.include(EntryInclude.FALLBACK)

    def include_embedded_items(self) -> EntryQuery:
        return self.include(EntryInclude.EMBEDDED_ITEMS)

    def include_metadata(self) -> EntryQuery:
        return self.include(EntryInclude.METADATA)

    def include_branch(self) -> EntryQuery:
        self.uri_parameters["include_branch"] = True
        return self

    def search(self, text: str) -> EntryQuery:
        """Typeahead search across text fields."""
        self.uri_parameters["typeahead"] = text
        return self

    def tags(self, text: str) -> EntryQuery:
        """Restrict results to entries carrying the given tags."""
        self.uri_parameters["tags"] = text
        return self


class TypedEntryQuery(EntryQuery):
    """Entry query bound to a caller model.

    Filter and sort keys are validated against the model's field keys.
    """

    def __init__(
        self,
        stack: BaseStack | None = None,
        *,
        content_type_uid: str | None = None,
        model: type[EntryDecodable],
        cache_policy: CachePolicy | None = None,
    ) -> None:
        super().__init__(
            stack,
            content_type_uid=content_type_uid,
            cache_policy=cache_policy,
            model=model,
        )

    def _check_field(self, field: str) -> None:
        keys = self.model.field_keys()  # type: ignore[union-attr]
        if field.split(".", 1)[0] not in keys:
            raise ConfigurationError(
                f"Unknown field '{field}' for {self.model.__name__}",  # type: ignore[union-attr]
                details={"field": field, "field_keys": sorted(keys)},
            )

    def where(self, field: str, operation: Operation) -> TypedEntryQuery:
        self._check_field(field)
        super().where(field, operation)
        return self

    def order_by(self, key: str, direction: SortDirection = SortDirection.ASC) -> TypedEntryQuery:
        self._check_field(key)
        super().order_by(key, direction)
        return self


class TaxonomyQuery(EntryQuery):
    """Query over entries across content types, filtered by taxonomy terms."""

    resource_kind = ResourceKind.TAXONOMY

    @property
    def path(self) -> str:
        return f"{ResourceKind.TAXONOMY.value}/entries"

    def where_term(self, taxonomy_uid: str, operation: Operation) -> TaxonomyQuery:
        """Filter on the terms of a taxonomy.

        Example:
            >>> query.where_term("color", Operation.eq_below("red"))
        """
        self.where(f"taxonomies.{taxonomy_uid}", operation)
        return self


class AssetQuery(BaseQuery):
    """Query over assets."""

    resource_kind = ResourceKind.ASSET

    def __init__(self, stack: BaseStack | None = None, **kwargs: Any) -> None:
        super().__init__(stack, **kwargs)
        self.include_flags = AssetInclude(0)

    def locale(self, code: str) -> AssetQuery:
        self.uri_parameters["locale"] = code
        return self

    def include(self, flags: AssetInclude) -> AssetQuery:
        """Request additional data in the response (flags accumulate)."""
        self.include_flags |= flags
        active = self.include_flags
        if AssetInclude.COUNT in active:
            self.uri_parameters["include_count"] = True
        if AssetInclude.RELATIVE_URL in active:
            self.uri_parameters["relative_urls"] = True
        if AssetInclude.DIMENSION in active:
            self.uri_parameters["include_dimension"] = True
        if AssetInclude.FALLBACK in active:
            self.uri_parameters["include_fallback"] = True
        if AssetInclude.METADATA in active:
            self.uri_parameters["include_metadata"] = True
        return self


class ContentTypeQuery(BaseQuery):
    """Query over content types."""

    resource_kind = ResourceKind.CONTENT_TYPE

    def __init__(self, stack: BaseStack | None = None, **kwargs: Any) -> None:
        super().__init__(stack, **kwargs)
        self.include_flags = ContentTypeInclude(0)

    def include(self, flags: ContentTypeInclude) -> ContentTypeQuery:
        """Request additional data in the response (flags accumulate)."""
        self.include_flags |= flags
        if ContentTypeInclude.COUNT in self.include_flags:
            self.uri_parameters["include_count"] = True
        if ContentTypeInclude.GLOBAL_FIELDS in self.include_flags:
            self.uri_parameters["include_global_field_schema"] = True
        return self


class GlobalFieldQuery(BaseQuery):
    """Query over global fields."""

    resource_kind = ResourceKind.GLOBAL_FIELD

    def __init__(self, stack: BaseStack | None = None, **kwargs: Any) -> None:
        super().__init__(stack, **kwargs)
        self.include_flags = GlobalFieldInclude(0)

    def include(self, flags: GlobalFieldInclude) -> GlobalFieldQuery:
        """Request additional data in the response (flags accumulate)."""
        self.include_flags |= flags
        if GlobalFieldInclude.GLOBAL_FIELD_SCHEMA in self.include_flags:
            self.uri_parameters["include_global_field_schema"] = True
        if GlobalFieldInclude.BRANCH in self.include_flags:
            self.uri_parameters["include_branch"] = True
        return self


def _as_mapping(key: str | Mapping[str, Any], value: Any) -> Mapping[str, Any]:
    if isinstance(key, Mapping):
        if value is not _MISSING:
            raise TypeError("value must not be given together with a mapping")
        return key
    if value is _MISSING:
        raise TypeError(f"Missing value for key '{key}'")
    return {key: value}


__all__ = [
    "MAX_LIMIT",
    "AssetQuery",
    "BaseQuery",
    "ContentTypeQuery",
    "EntryQuery",
    "GlobalFieldQuery",
    "TaxonomyQuery",
    "TypedEntryQuery",
]
