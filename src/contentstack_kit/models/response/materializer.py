"""Response materializer.

Turns raw response bytes into a :class:`ContentstackResponse`:

1. parse the bytes as JSON
2. select the envelope key of the resource kind (``entries`` / ``entry``, ...)
3. resolve reference stubs for the requested include paths
4. decode every item, failing on the first item that does not decode

Reference resolution is purely local. A reference stub looks like
``{"uid": "blt1", "_content_type_uid": "author"}``; it is replaced with the
full object found in the ``includes`` section of the envelope or elsewhere
in the response. Substitutes decode into the model registered for their
content type, or into a :class:`FieldBag`.
"""

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ...exceptions import (
    InvalidUIDError,
    ItemDecodeError,
    SchemaMismatchError,
    UnparseableResponseError,
)
from ..enums import ResourceKind, ResponseSource
from .decodable import ModelRegistry
from .field_bag import FieldBag
from .models import AssetModel, ContentTypeModel, GlobalFieldModel, SyncItem, TaxonomyModel
from .response import ContentstackResponse

logger = logging.getLogger(__name__)

STUB_KEYS = frozenset({"uid", "_content_type_uid"})

_DEFAULT_MODELS: dict[ResourceKind, type[Any]] = {
    ResourceKind.ASSET: AssetModel,
    ResourceKind.CONTENT_TYPE: ContentTypeModel,
    ResourceKind.GLOBAL_FIELD: GlobalFieldModel,
    ResourceKind.SYNC: SyncItem,
    ResourceKind.TAXONOMY: TaxonomyModel,
}

ReferenceKey = tuple[str, str]


def decode_item(model: type[Any], fields: dict[str, Any]) -> Any:
    """Decode one JSON object into ``model``.

    Models implementing ``from_fields`` are used as such; other pydantic
    models are validated directly.
    """
    if hasattr(model, "from_fields"):
        return model.from_fields(fields)
    if isinstance(model, type) and issubclass(model, BaseModel):
        return model.model_validate(fields)
    return model(**fields)


def _is_stub(value: dict[str, Any]) -> bool:
    return set(value) <= STUB_KEYS


def _reference_key(value: dict[str, Any]) -> ReferenceKey | None:
    content_type_uid = value.get("_content_type_uid")
    uid = value.get("uid")
    if isinstance(content_type_uid, str) and isinstance(uid, str):
        return content_type_uid, uid
    return None


def build_include_tree(paths: Iterable[str]) -> dict[str, Any]:
    """Turn dotted include paths into a nested tree.

    Example:
        >>> build_include_tree(["author", "author.books", "brand"])
        {'author': {'books': {}}, 'brand': {}}
    """
    tree: dict[str, Any] = {}
    for path in paths:
        node = tree
        for part in path.split("."):
            if part:
                node = node.setdefault(part, {})
    return tree


class ResponseMaterializer:
    """Default :class:`~contentstack_kit.protocols.ResponseParser`.

    Args:
        registry: Models used to decode resolved references
    """

    def __init__(self, registry: ModelRegistry | None = None) -> None:
        self.registry = registry if registry is not None else ModelRegistry()

    def load(self, body: bytes) -> dict[str, Any]:
        """Parse response bytes into the JSON envelope.

        Raises:
            UnparseableResponseError: If the bytes are not valid JSON
            SchemaMismatchError: If the JSON is not an object
        """
        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise UnparseableResponseError(
                f"Response is not valid JSON: {e}",
                body=body,
                details={"body_preview": body[:500].decode("utf-8", errors="replace")},
            ) from e
        if not isinstance(data, dict):
            raise SchemaMismatchError(
                f"Expected a JSON object, got {type(data).__name__}",
                details={"body_preview": body[:500].decode("utf-8", errors="replace")},
            )
        return data

    def default_model(self, kind: ResourceKind, content_type_uid: str | None = None) -> type[Any]:
        """Model used when the caller did not provide one."""
        if kind in _DEFAULT_MODELS:
            return _DEFAULT_MODELS[kind]
        return self.registry.get(content_type_uid)

    def parse(
        self,
        body: bytes,
        *,
        kind: ResourceKind,
        model: type[Any] | None = None,
        include_paths: Iterable[str] = (),
        content_type_uid: str | None = None,
        uid: str | None = None,
        source: ResponseSource = ResponseSource.NETWORK,
    ) -> ContentstackResponse[Any]:
        """Materialize a response body.

        Args:
            body: Raw response bytes
            kind: Resource kind, selects the envelope key
            model: Model to decode items into (defaults per resource kind)
            include_paths: Reference fields requested by the query
            content_type_uid: Content type of queried entries
            uid: UID of a single-resource fetch; the response must carry
                exactly that item
            source: Where the bytes came from

        Returns:
            Decoded response

        Raises:
            UnparseableResponseError: If the body is not JSON
            SchemaMismatchError: If the envelope key is missing
            ItemDecodeError: If an item fails to decode (carries its index)
            InvalidUIDError: If a single-resource fetch carried no item
        """
        envelope = self.load(body)
        raw_items = self._select_items(envelope, kind, uid)

        lookup = self._index_references(envelope, raw_items)
        tree = build_include_tree(include_paths)
        item_model = model or self.default_model(kind, content_type_uid)

        items: list[Any] = []
        for index, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                raise ItemDecodeError(
                    f"Item {index} is not an object",
                    index=index,
                    details={"item": raw},
                )
            try:
                expanded = self._expand(raw, tree, lookup) if tree else raw
                items.append(decode_item(item_model, expanded))
            except (PydanticValidationError, TypeError, ValueError) as e:
                raise ItemDecodeError(
                    f"Failed to decode item {index} as {getattr(item_model, '__name__', item_model)}: {e}",
                    index=index,
                    details={"uid": raw.get("uid")},
                ) from e

        return ContentstackResponse(
            items=items,
            count=envelope.get("count") if isinstance(envelope.get("count"), int) else None,
            skip=envelope.get("skip") if isinstance(envelope.get("skip"), int) else None,
            limit=envelope.get("limit") if isinstance(envelope.get("limit"), int) else None,
            fields=self._sibling_fields(envelope, kind),
            source=source,
        )

    # Envelope

    def _select_items(
        self, envelope: dict[str, Any], kind: ResourceKind, uid: str | None
    ) -> list[Any]:
        collection_key, singular_key = kind.envelope_keys

        if uid is not None:
            item = envelope.get(singular_key)
            if item is None and isinstance(envelope.get(collection_key), list):
                item = next(iter(envelope[collection_key]), None)
            if item is None:
                if singular_key in envelope or collection_key in envelope:
                    raise InvalidUIDError(uid)
                raise SchemaMismatchError(
                    f"Response has no '{singular_key}' key",
                    details={"keys": sorted(envelope)},
                )
            return [item]

        if collection_key in envelope:
            items = envelope[collection_key]
            if not isinstance(items, list):
                raise SchemaMismatchError(
                    f"'{collection_key}' is not an array",
                    details={"type": type(items).__name__},
                )
            return items
        if singular_key in envelope:
            return [envelope[singular_key]]

        raise SchemaMismatchError(
            f"Response has neither '{collection_key}' nor '{singular_key}' key",
            details={"keys": sorted(envelope)},
        )

    def _sibling_fields(self, envelope: dict[str, Any], kind: ResourceKind) -> dict[str, Any]:
        collection_key, singular_key = kind.envelope_keys
        skipped = {collection_key, singular_key, "count", "skip", "limit", "includes"}
        fields = {k: v for k, v in envelope.items() if k not in skipped}

        content_type = fields.get("content_type")
        if kind in (ResourceKind.ENTRY, ResourceKind.TAXONOMY) and isinstance(content_type, dict):
            try:
                fields["content_type"] = ContentTypeModel.model_validate(content_type)
            except PydanticValidationError as e:
                raise SchemaMismatchError(f"Included content type does not decode: {e}") from e
        return fields

    # References

    def _index_references(
        self, envelope: dict[str, Any], items: list[Any]
    ) -> dict[ReferenceKey, dict[str, Any]]:
        lookup: dict[ReferenceKey, dict[str, Any]] = {}

        def visit(value: Any) -> None:
            if isinstance(value, list):
                for element in value:
                    visit(element)
            elif isinstance(value, dict):
                key = _reference_key(value)
                if key is not None and not _is_stub(value):
                    lookup.setdefault(key, value)
                for nested in value.values():
                    visit(nested)

        includes = envelope.get("includes")
        if isinstance(includes, dict):
            for content_type_uid, objects in includes.items():
                for obj in objects if isinstance(objects, list) else []:
                    if isinstance(obj, dict) and isinstance(obj.get("uid"), str):
                        obj = {"_content_type_uid": content_type_uid, **obj}
                        lookup.setdefault((obj["_content_type_uid"], obj["uid"]), obj)
        visit(includes)
        visit(items)
        return lookup

    def _expand(
        self,
        obj: dict[str, Any],
        tree: dict[str, Any],
        lookup: dict[ReferenceKey, dict[str, Any]],
    ) -> dict[str, Any]:
        result = dict(obj)
        for field, subtree in tree.items():
            if field not in result:
                continue
            value = result[field]
            if isinstance(value, list):
                result[field] = [self._substitute(v, subtree, lookup) for v in value]
            else:
                result[field] = self._substitute(value, subtree, lookup)
        return result

    def _substitute(
        self,
        value: Any,
        subtree: dict[str, Any],
        lookup: dict[ReferenceKey, dict[str, Any]],
    ) -> Any:
        if not isinstance(value, dict):
            return value
        key = _reference_key(value)
        if key is None:
            return value

        target = lookup.get(key)
        if target is None:
            if _is_stub(value):
                logger.debug(f"Unresolved reference {key[0]}/{key[1]}, keeping stub")
                return value
            target = value

        expanded = self._expand(target, subtree, lookup) if subtree else target
        return decode_item(self.registry.get(key[0]), expanded)
