"""Tests for response materialization and reference resolution."""

import json
from typing import Any

import pytest
from pydantic import Field

from contentstack_kit import ContentstackModel
from contentstack_kit.exceptions import (
    InvalidUIDError,
    ItemDecodeError,
    SchemaMismatchError,
    UnparseableResponseError,
)
from contentstack_kit.models.enums import ResourceKind, ResponseSource
from contentstack_kit.models.response import (
    AssetModel,
    ContentTypeModel,
    EntryModel,
    FieldBag,
    GlobalFieldModel,
    ModelRegistry,
    ResponseMaterializer,
    build_include_tree,
)


class Brand(ContentstackModel):
    uid: str
    title: str | None = None


class Product(ContentstackModel):
    uid: str
    title: str
    price: float
    brand: list[Brand] = Field(default_factory=list)


def _body(data: Any) -> bytes:
    return json.dumps(data).encode()


@pytest.fixture
def materializer() -> ResponseMaterializer:
    """Materializer with an empty registry."""
    return ResponseMaterializer()


class TestEnvelope:
    """Tests for parsing and envelope selection."""

    def test_entries_decode_to_field_bags(
        self, materializer: ResponseMaterializer, entries_response: dict[str, Any]
    ) -> None:
        """Test untyped entries become field bags in server order."""
        response = materializer.parse(_body(entries_response), kind=ResourceKind.ENTRY)

        assert [item.uid for item in response.items] == ["blt_entry_1", "blt_entry_2"]
        assert isinstance(response.items[0], FieldBag)
        assert response.count == 2
        assert response.source == ResponseSource.NETWORK

    def test_count_absent(self, materializer: ResponseMaterializer) -> None:
        """Test count is None unless the server sent it."""
        response = materializer.parse(_body({"entries": []}), kind=ResourceKind.ENTRY)
        assert response.items == []
        assert response.count is None

    def test_invalid_json(self, materializer: ResponseMaterializer) -> None:
        """Test non-JSON bodies carry the raw bytes."""
        with pytest.raises(UnparseableResponseError) as exc_info:
            materializer.parse(b"<html>oops</html>", kind=ResourceKind.ENTRY)
        assert exc_info.value.body == b"<html>oops</html>"

    def test_missing_envelope_key(self, materializer: ResponseMaterializer) -> None:
        """Test an unexpected envelope is a schema mismatch."""
        with pytest.raises(SchemaMismatchError, match="neither 'assets' nor 'asset'"):
            materializer.parse(_body({"entries": []}), kind=ResourceKind.ASSET)

    def test_non_object_json(self, materializer: ResponseMaterializer) -> None:
        """Test a JSON array is not an envelope."""
        with pytest.raises(SchemaMismatchError):
            materializer.parse(b"[]", kind=ResourceKind.ENTRY)

    def test_single_item_envelope(
        self, materializer: ResponseMaterializer, entry_payload: dict[str, Any]
    ) -> None:
        """Test a single-resource fetch reads the singular key."""
        response = materializer.parse(
            _body({"entry": entry_payload}), kind=ResourceKind.ENTRY, uid="blt_entry_1"
        )
        assert response.first is not None
        assert response.first.title == "Gold Ring"

    def test_single_fetch_without_item(self, materializer: ResponseMaterializer) -> None:
        """Test an empty single-resource response is an invalid uid."""
        with pytest.raises(InvalidUIDError, match="The uid blt_missing is not valid."):
            materializer.parse(_body({"entries": []}), kind=ResourceKind.ENTRY, uid="blt_missing")

    def test_included_content_type_is_decoded(
        self,
        materializer: ResponseMaterializer,
        entry_payload: dict[str, Any],
        content_type_payload: dict[str, Any],
    ) -> None:
        """Test the sibling content_type is exposed in fields."""
        body = _body({"entries": [entry_payload], "content_type": content_type_payload})
        response = materializer.parse(body, kind=ResourceKind.ENTRY)

        content_type = response.fields["content_type"]
        assert isinstance(content_type, ContentTypeModel)
        assert content_type.reference_fields() == ["brand"]


class TestTypedDecoding:
    """Tests for caller models and fail-fast decoding."""

    def test_typed_items(
        self, materializer: ResponseMaterializer, entries_response: dict[str, Any]
    ) -> None:
        """Test items decode into the caller model, ignoring extra keys."""
        response = materializer.parse(
            _body(entries_response), kind=ResourceKind.ENTRY, model=Product
        )
        assert all(isinstance(item, Product) for item in response.items)
        assert response.items[1].price == 40

    def test_first_bad_item_fails_the_page(self, materializer: ResponseMaterializer) -> None:
        """Test decoding stops at the first failing item and reports its index."""
        body = _body(
            {
                "entries": [
                    {"uid": "a", "title": "A", "price": 1},
                    {"uid": "b", "title": "B", "price": "not a number"},
                    {"uid": "c", "title": "C", "price": 3},
                ]
            }
        )
        with pytest.raises(ItemDecodeError) as exc_info:
            materializer.parse(body, kind=ResourceKind.ENTRY, model=Product)
        assert exc_info.value.index == 1

    def test_registered_model_for_content_type(self, entries_response: dict[str, Any]) -> None:
        """Test the registry supplies the model of the queried content type."""
        materializer = ResponseMaterializer(ModelRegistry({"product": Product}))
        response = materializer.parse(
            _body(entries_response), kind=ResourceKind.ENTRY, content_type_uid="product"
        )
        assert isinstance(response.items[0], Product)

    def test_entry_model(
        self, materializer: ResponseMaterializer, entry_payload: dict[str, Any]
    ) -> None:
        """Test the generic entry model keeps custom fields."""
        response = materializer.parse(
            _body({"entries": [entry_payload]}), kind=ResourceKind.ENTRY, model=EntryModel
        )
        entry = response.items[0]
        assert entry.version == 3
        assert entry.get_field("price") == 120.5

    def test_registry_rejects_non_decodable(self) -> None:
        """Test only decodable models can be registered."""
        with pytest.raises(TypeError):
            ModelRegistry().register("product", dict)


class TestReferenceResolution:
    """Tests for reference stub substitution."""

    def test_requested_reference_is_resolved(
        self, materializer: ResponseMaterializer, entries_response: dict[str, Any]
    ) -> None:
        """Test stubs of included fields are replaced by their full objects."""
        response = materializer.parse(
            _body(entries_response), kind=ResourceKind.ENTRY, include_paths=["brand"]
        )

        brand = response.items[0]["brand"][0]
        assert isinstance(brand, FieldBag)
        assert brand.get_str("title") == "Acme"
        assert brand.content_type_uid == "brand"
        assert response.items[1]["brand"][0]["title"] == "Globex"

    def test_unrequested_reference_stays_stub(
        self, materializer: ResponseMaterializer, entries_response: dict[str, Any]
    ) -> None:
        """Test fields that were not requested keep the raw stub."""
        response = materializer.parse(_body(entries_response), kind=ResourceKind.ENTRY)

        brand = response.items[0]["brand"][0]
        assert type(brand) is dict
        assert brand == {"uid": "blt_brand_1", "_content_type_uid": "brand"}

    def test_unresolvable_stub_stays_raw(
        self, materializer: ResponseMaterializer, entries_response: dict[str, Any]
    ) -> None:
        """Test a stub without matching object is left untouched."""
        response = materializer.parse(
            _body(entries_response), kind=ResourceKind.ENTRY, include_paths=["category"]
        )
        category = response.items[0]["category"][0]
        assert category == {"uid": "blt_category_1", "_content_type_uid": "category"}

    def test_registered_model_for_reference(self, entries_response: dict[str, Any]) -> None:
        """Test substitutes decode into the model registered for their content type."""
        materializer = ResponseMaterializer(ModelRegistry({"brand": Brand}))
        response = materializer.parse(
            _body(entries_response), kind=ResourceKind.ENTRY, include_paths=["brand"]
        )
        assert response.items[0]["brand"][0] == Brand(uid="blt_brand_1", title="Acme")

    def test_typed_parent_with_resolved_reference(
        self, materializer: ResponseMaterializer, entries_response: dict[str, Any]
    ) -> None:
        """Test typed parents receive resolved references."""
        response = materializer.parse(
            _body(entries_response),
            kind=ResourceKind.ENTRY,
            model=Product,
            include_paths=["brand"],
        )
        assert response.items[0].brand == [Brand(uid="blt_brand_1", title="Acme")]

    def test_inlined_reference(self, materializer: ResponseMaterializer) -> None:
        """Test objects already inlined by the server are decoded as references."""
        body = _body(
            {
                "entries": [
                    {
                        "uid": "e1",
                        "title": "Ring",
                        "brand": [{"uid": "b1", "_content_type_uid": "brand", "title": "Acme"}],
                    },
                    {
                        "uid": "e2",
                        "title": "Necklace",
                        "brand": [{"uid": "b1", "_content_type_uid": "brand"}],
                    },
                ]
            }
        )
        response = materializer.parse(body, kind=ResourceKind.ENTRY, include_paths=["brand"])

        assert isinstance(response.items[0]["brand"][0], FieldBag)
        # The stub of the second entry resolves against the object inlined in the first
        assert response.items[1]["brand"][0]["title"] == "Acme"

    def test_nested_reference_path(self, materializer: ResponseMaterializer) -> None:
        """Test dotted include paths resolve references of references."""
        body = _body(
            {
                "entries": [
                    {
                        "uid": "p1",
                        "title": "Post",
                        "author": {"uid": "a1", "_content_type_uid": "author"},
                    }
                ],
                "includes": [
                    {
                        "uid": "a1",
                        "_content_type_uid": "author",
                        "name": "Ada",
                        "books": [{"uid": "k1", "_content_type_uid": "book"}],
                    },
                    {"uid": "k1", "_content_type_uid": "book", "title": "Notes"},
                ],
            }
        )
        response = materializer.parse(
            body, kind=ResourceKind.ENTRY, include_paths=["author", "author.books"]
        )

        author = response.items[0]["author"]
        assert author["name"] == "Ada"
        assert author["books"][0]["title"] == "Notes"

    def test_nested_reference_not_requested(self, materializer: ResponseMaterializer) -> None:
        """Test only the requested depth is resolved."""
        body = _body(
            {
                "entries": [
                    {"uid": "p1", "author": {"uid": "a1", "_content_type_uid": "author"}}
                ],
                "includes": {
                    "author": [
                        {"uid": "a1", "books": [{"uid": "k1", "_content_type_uid": "book"}]}
                    ],
                    "book": [{"uid": "k1", "title": "Notes"}],
                },
            }
        )
        response = materializer.parse(body, kind=ResourceKind.ENTRY, include_paths=["author"])
        assert response.items[0]["author"]["books"] == [{"uid": "k1", "_content_type_uid": "book"}]

    def test_build_include_tree(self) -> None:
        """Test dotted paths are merged into a tree."""
        assert build_include_tree(["author", "author.books", "brand"]) == {
            "author": {"books": {}},
            "brand": {},
        }


class TestResourceModels:
    """Tests for default models of non-entry resources."""

    def test_asset_file_size_and_dimension(
        self, materializer: ResponseMaterializer, asset_payload: dict[str, Any]
    ) -> None:
        """Test file_size strings are decoded as numbers."""
        response = materializer.parse(_body({"assets": [asset_payload]}), kind=ResourceKind.ASSET)

        asset = response.items[0]
        assert isinstance(asset, AssetModel)
        assert asset.file_size == 48213.0
        assert asset.dimension is not None
        assert asset.dimension.width == 800

    def test_global_field_detection(self, materializer: ResponseMaterializer) -> None:
        """Test nested global fields are detected at any depth."""
        body = _body(
            {
                "global_fields": [
                    {
                        "uid": "seo",
                        "title": "SEO",
                        "schema": [{"uid": "meta_title", "data_type": "text"}],
                    },
                    {
                        "uid": "hero",
                        "title": "Hero",
                        "schema": [
                            {
                                "uid": "group",
                                "data_type": "group",
                                "schema": [{"uid": "seo", "data_type": "global_field"}],
                            }
                        ],
                    },
                ]
            }
        )
        response = materializer.parse(body, kind=ResourceKind.GLOBAL_FIELD)

        assert all(isinstance(item, GlobalFieldModel) for item in response.items)
        assert response.items[0].has_global_field is False
        assert response.items[1].has_global_field is True
