"""Pytest configuration and shared fixtures."""

from typing import Any

import pytest

from contentstack_kit import ConfigFactory, ContentstackConfig

BASE_URL = "https://cdn.contentstack.io/v3"


@pytest.fixture
def contentstack_config() -> ContentstackConfig:
    """Create a test stack configuration.

    Returns:
        Test configuration with mock credentials and no retries
    """
    return ConfigFactory.create(
        api_key="blt_test_api_key",
        delivery_token="cs_test_delivery_token",  # noqa: S106
        environment="production",
        retry={"max_attempts": 1},
    )


@pytest.fixture
def entry_payload() -> dict[str, Any]:
    """A single published entry of the ``product`` content type."""
    return {
        "uid": "blt_entry_1",
        "title": "Gold Ring",
        "locale": "en-us",
        "price": 120.5,
        "tags": ["jewelry"],
        "created_at": "2024-01-01T00:00:00.000Z",
        "updated_at": "2024-01-02T00:00:00.000Z",
        "_version": 3,
        "brand": [{"uid": "blt_brand_1", "_content_type_uid": "brand"}],
        "category": [{"uid": "blt_category_1", "_content_type_uid": "category"}],
    }


@pytest.fixture
def entries_response(entry_payload: dict[str, Any]) -> dict[str, Any]:
    """Entries envelope with an ``includes`` section for the brand reference."""
    second = {
        **entry_payload,
        "uid": "blt_entry_2",
        "title": "Silver Ring",
        "price": 40,
        "brand": [{"uid": "blt_brand_2", "_content_type_uid": "brand"}],
    }
    return {
        "entries": [entry_payload, second],
        "count": 2,
        "includes": {
            "brand": [
                {"uid": "blt_brand_1", "title": "Acme", "country": "FR"},
                {"uid": "blt_brand_2", "title": "Globex", "country": "US"},
            ]
        },
    }


@pytest.fixture
def content_type_payload() -> dict[str, Any]:
    """Schema of the ``product`` content type."""
    return {
        "uid": "product",
        "title": "Product",
        "description": "Products of the shop",
        "schema": [
            {"uid": "title", "data_type": "text", "display_name": "Title"},
            {"uid": "price", "data_type": "number", "display_name": "Price"},
            {
                "uid": "brand",
                "data_type": "reference",
                "display_name": "Brand",
                "reference_to": ["brand"],
            },
        ],
    }


@pytest.fixture
def asset_payload() -> dict[str, Any]:
    """An image asset with dimensions."""
    return {
        "uid": "blt_asset_1",
        "title": "ring.png",
        "filename": "ring.png",
        "url": "https://images.contentstack.io/v3/assets/blt/ring.png",
        "content_type": "image/png",
        "file_size": "48213",
        "tags": [],
        "dimension": {"height": 600, "width": 800},
    }

