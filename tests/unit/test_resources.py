"""Tests for the resource façades."""

import json
from typing import Any

import pytest
import respx
from httpx import Response

from contentstack_kit import (
    AssetModel,
    ContentstackConfig,
    ContentstackModel,
    ContentTypeModel,
    FieldBag,
    GlobalFieldModel,
    Operation,
    Stack,
    TaxonomyModel,
)
from contentstack_kit.exceptions import ConfigurationError, InvalidUIDError

BASE_URL = "https://cdn.contentstack.io/v3"


class Product(ContentstackModel):
    uid: str
    title: str
    price: float


@pytest.fixture
def stack(contentstack_config: ContentstackConfig):
    with Stack(contentstack_config) as stack:
        yield stack


class TestEntry:
    """Entry façade."""

    @respx.mock
    def test_fetch(self, stack: Stack, entry_payload: dict[str, Any]) -> None:
        """Test fetching a single entry by uid."""
        route = respx.get(f"{BASE_URL}/content_types/product/entries/blt_entry_1").mock(
            return_value=Response(200, json={"entry": entry_payload})
        )

        entry = stack.content_type("product").entry("blt_entry_1").locale("fr-fr").fetch()

        assert isinstance(entry, FieldBag)
        assert entry.uid == "blt_entry_1"
        assert entry.get_float("price") == 120.5
        assert route.calls.last.request.url.params["locale"] == "fr-fr"

    @respx.mock
    def test_fetch_typed(self, stack: Stack, entry_payload: dict[str, Any]) -> None:
        """Test fetching into a caller model."""
        respx.get(f"{BASE_URL}/content_types/product/entries/blt_entry_1").mock(
            return_value=Response(200, json={"entry": entry_payload})
        )

        product = stack.content_type("product").entry("blt_entry_1").fetch(Product)

        assert product == Product(uid="blt_entry_1", title="Gold Ring", price=120.5)

    @respx.mock
    def test_fetch_registered_model(self, stack: Stack, entry_payload: dict[str, Any]) -> None:
        """Test the registered model is the default for its content type."""
        respx.get(f"{BASE_URL}/content_types/product/entries/blt_entry_1").mock(
            return_value=Response(200, json={"entry": entry_payload})
        )
        stack.register_model("product", Product)

        assert isinstance(stack.content_type("product").entry("blt_entry_1").fetch(), Product)

    @respx.mock
    def test_fetch_with_references(self, stack: Stack, entry_payload: dict[str, Any]) -> None:
        """Test references requested on the façade are resolved."""
        route = respx.get(f"{BASE_URL}/content_types/product/entries/blt_entry_1").mock(
            return_value=Response(
                200,
                json={
                    "entry": entry_payload,
                    "includes": {"brand": [{"uid": "blt_brand_1", "title": "Acme"}]},
                },
            )
        )

        entry = (
            stack.content_type("product")
            .entry("blt_entry_1")
            .include_reference(["brand"])
            .only(["price"])
            .fetch()
        )

        assert entry["brand"][0]["title"] == "Acme"
        params = route.calls.last.request.url.params
        assert params.get_list("include[]") == ["brand"]
        assert params.get_list("only[BASE][]") == ["price", "locale", "title"]

    @respx.mock
    def test_fetch_empty_entry(self, stack: Stack) -> None:
        """Test a fetch whose response carries no entry."""
        respx.get(f"{BASE_URL}/content_types/product/entries/blt_missing").mock(
            return_value=Response(200, json={"entries": []})
        )

        with pytest.raises(InvalidUIDError, match="blt_missing"):
            stack.content_type("product").entry("blt_missing").fetch()

    def test_fetch_without_uid(self, stack: Stack) -> None:
        """Test fetching requires an entry uid."""
        with pytest.raises(ConfigurationError, match="Please provide Entry uid"):
            stack.content_type("product").entry().fetch()

    def test_entry_without_content_type(self, stack: Stack) -> None:
        """Test entries require a content type uid."""
        with pytest.raises(ConfigurationError, match="Please provide ContentType uid"):
            stack.content_type().entry()

    @respx.mock
    def test_query_restricted_to_uid(
        self, stack: Stack, entries_response: dict[str, Any]
    ) -> None:
        """Test a query from an entry with a uid filters on it."""
        route = respx.get(f"{BASE_URL}/content_types/product/entries").mock(
            return_value=Response(200, json=entries_response)
        )

        stack.content_type("product").entry("blt_entry_1").query().find()

        query = route.calls.last.request.url.params["query"]
        assert json.loads(query) == {"uid": "blt_entry_1"}

    def test_typed_query_checks_fields(self, stack: Stack) -> None:
        """Test typed queries reject unknown fields."""
        query = stack.content_type("product").entry().query(Product)

        query.where("price", Operation.is_greater_than(10))
        with pytest.raises(ConfigurationError, match="Unknown field 'weight'"):
            query.where("weight", Operation.exists(True))


class TestContentType:
    """Content type façade."""

    @respx.mock
    def test_fetch(self, stack: Stack, content_type_payload: dict[str, Any]) -> None:
        """Test fetching a content type schema."""
        route = respx.get(f"{BASE_URL}/content_types/product").mock(
            return_value=Response(200, json={"content_type": content_type_payload})
        )

        content_type = stack.content_type("product").include_global_fields().fetch()

        assert isinstance(content_type, ContentTypeModel)
        assert content_type.reference_fields() == ["brand"]
        assert route.calls.last.request.url.params["include_global_field_schema"] == "true"

    @respx.mock
    def test_query_all(self, stack: Stack, content_type_payload: dict[str, Any]) -> None:
        """Test listing content types."""
        respx.get(f"{BASE_URL}/content_types").mock(
            return_value=Response(
                200, json={"content_types": [content_type_payload], "count": 1}
            )
        )

        response = stack.content_type().query().find()

        assert response.first.uid == "product"

    def test_fetch_without_uid(self, stack: Stack) -> None:
        """Test fetching requires a content type uid."""
        with pytest.raises(ConfigurationError, match="Please provide ContentType uid"):
            stack.content_type().fetch()


class TestAsset:
    """Asset façade."""

    @respx.mock
    def test_fetch(self, stack: Stack, asset_payload: dict[str, Any]) -> None:
        """Test fetching an asset with dimensions."""
        route = respx.get(f"{BASE_URL}/assets/blt_asset_1").mock(
            return_value=Response(200, json={"asset": asset_payload})
        )

        asset = stack.asset("blt_asset_1").include_dimension().include_relative_url().fetch()

        assert isinstance(asset, AssetModel)
        assert asset.file_size == 48213.0
        assert asset.dimension is not None
        assert asset.dimension.width == 800
        params = route.calls.last.request.url.params
        assert params["include_dimension"] == "true"
        assert params["relative_urls"] == "true"

    @respx.mock
    def test_query(self, stack: Stack, asset_payload: dict[str, Any]) -> None:
        """Test querying assets with a filter."""
        route = respx.get(f"{BASE_URL}/assets").mock(
            return_value=Response(200, json={"assets": [asset_payload]})
        )

        response = stack.asset().query().where("filename", Operation.matches("^ring")).find()

        assert response.items[0].filename == "ring.png"
        query = json.loads(route.calls.last.request.url.params["query"])
        assert query == {"filename": {"$regex": "^ring"}}

    def test_fetch_without_uid(self, stack: Stack) -> None:
        """Test fetching requires an asset uid."""
        with pytest.raises(ConfigurationError, match="Please provide Asset uid"):
            stack.asset().fetch()


class TestGlobalField:
    """Global field façade."""

    @respx.mock
    def test_fetch(self, stack: Stack) -> None:
        """Test fetching a global field that nests another one."""
        payload = {
            "uid": "seo",
            "title": "SEO",
            "schema": [
                {"uid": "meta", "data_type": "group", "schema": [{"uid": "og", "data_type": "global_field"}]}
            ],
        }
        route = respx.get(f"{BASE_URL}/global_fields/seo").mock(
            return_value=Response(200, json={"global_field": payload})
        )

        field = stack.global_field("seo").include_global_field_schema().fetch()

        assert isinstance(field, GlobalFieldModel)
        assert field.has_global_field is True
        assert route.calls.last.request.url.params["include_global_field_schema"] == "true"

    @respx.mock
    def test_find(self, stack: Stack) -> None:
        """Test listing global fields with the façade's flags."""
        route = respx.get(f"{BASE_URL}/global_fields").mock(
            return_value=Response(200, json={"global_fields": [{"uid": "seo", "title": "SEO"}]})
        )

        response = stack.global_field().include_branch().find()

        assert response.items[0].has_global_field is False
        assert route.calls.last.request.url.params["include_branch"] == "true"

    def test_fetch_without_uid(self, stack: Stack) -> None:
        """Test fetching requires a global field uid."""
        with pytest.raises(ConfigurationError, match="Please provide GlobalField uid"):
            stack.global_field().fetch()


class TestTaxonomy:
    """Taxonomy façade."""

    @respx.mock
    def test_query_terms(self, stack: Stack) -> None:
        """Test filtering entries by taxonomy terms."""
        route = respx.get(f"{BASE_URL}/taxonomies/entries").mock(
            return_value=Response(
                200,
                json={
                    "entries": [
                        {
                            "uid": "blt_entry_1",
                            "title": "Red shirt",
                            "taxonomies": [{"taxonomy_uid": "color", "term_uid": "red"}],
                        }
                    ]
                },
            )
        )

        response = stack.taxonomy().query().where_term("color", Operation.eq_below("red")).find()

        assert isinstance(response.items[0], TaxonomyModel)
        assert response.items[0].taxonomies[0]["term_uid"] == "red"
        query = json.loads(route.calls.last.request.url.params["query"])
        assert query == {"taxonomies.color": {"$eq_below": "red"}}
