"""Unit tests for the asynchronous stack."""

import asyncio
import json
from typing import Any

import httpx
import pytest
import respx
from httpx import Response

from contentstack_kit import AsyncStack, ContentstackConfig, FieldBag, Operation, SyncStack
from contentstack_kit.exceptions import (
    AuthenticationError,
    InvalidUIDError,
)
from contentstack_kit.exceptions import (
    TimeoutError as ContentstackTimeoutError,
)

BASE_URL = "https://cdn.contentstack.io/v3"
ENTRIES_URL = f"{BASE_URL}/content_types/product/entries"


class TestAsyncStack:
    """Test cases for AsyncStack."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_find(
        self, contentstack_config: ContentstackConfig, entries_response: dict[str, Any]
    ) -> None:
        """Test an awaited query."""
        route = respx.get(ENTRIES_URL).mock(return_value=Response(200, json=entries_response))

        async with AsyncStack(contentstack_config) as stack:
            response = await (
                stack.content_type("product")
                .entry()
                .query()
                .where("title", Operation.equals("Gold Ring"))
                .include_reference(["brand"])
                .find()
            )

        assert response.count == 2
        assert response.items[0]["brand"][0]["country"] == "FR"
        params = route.calls.last.request.url.params
        assert json.loads(params["query"]) == {"title": "Gold Ring"}
        assert params["environment"] == "production"

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_entry(
        self, contentstack_config: ContentstackConfig, entry_payload: dict[str, Any]
    ) -> None:
        """Test fetching a single entry."""
        respx.get(f"{ENTRIES_URL}/blt_entry_1").mock(
            return_value=Response(200, json={"entry": entry_payload})
        )

        async with AsyncStack(contentstack_config) as stack:
            entry = await stack.content_type("product").entry("blt_entry_1").fetch()

        assert isinstance(entry, FieldBag)
        assert entry.title == "Gold Ring"

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_invalid_uid(self, contentstack_config: ContentstackConfig) -> None:
        """Test a fetch without an item in the response."""
        respx.get(f"{ENTRIES_URL}/blt_nope").mock(
            return_value=Response(200, json={"entry": None})
        )

        async with AsyncStack(contentstack_config) as stack:
            with pytest.raises(InvalidUIDError):
                await stack.content_type("product").entry("blt_nope").fetch()

    @pytest.mark.asyncio
    @respx.mock
    async def test_concurrent_queries(
        self, contentstack_config: ContentstackConfig, entries_response: dict[str, Any]
    ) -> None:
        """Test several queries awaited together."""
        route = respx.get(ENTRIES_URL).mock(return_value=Response(200, json=entries_response))

        async with AsyncStack(contentstack_config) as stack:
            responses = await asyncio.gather(
                *(
                    stack.content_type("product").entry().query().skip(skip).limit(2).find()
                    for skip in (0, 2, 4)
                )
            )

        assert route.call_count == 3
        assert [r.skip for r in responses] == [0, 2, 4]

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_mapping(self, contentstack_config: ContentstackConfig) -> None:
        """Test error envelopes map to exceptions."""
        respx.get(ENTRIES_URL).mock(
            return_value=Response(
                401,
                json={
                    "error_message": "Invalid access token.",
                    "error_code": 105,
                    "errors": {"access_token": ["is not valid."]},
                },
            )
        )

        async with AsyncStack(contentstack_config) as stack:
            with pytest.raises(AuthenticationError) as exc_info:
                await stack.content_type("product").entry().query().find()

        assert exc_info.value.error_info.access_token == ["is not valid."]

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self, contentstack_config: ContentstackConfig) -> None:
        """Test timeouts are wrapped."""
        respx.get(ENTRIES_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        async with AsyncStack(contentstack_config) as stack:
            with pytest.raises(ContentstackTimeoutError):
                await stack.content_type("product").entry().query().find()

    @respx.mock
    async def test_cancellation_propagates(self, contentstack_config: ContentstackConfig) -> None:
        """Test cancelling a pending query raises CancelledError without retrying."""
        started = asyncio.Event()

        async def stall(request: httpx.Request) -> Response:
            started.set()
            await asyncio.sleep(10)
            return Response(200, json={"entries": []})

        route = respx.get(ENTRIES_URL).mock(side_effect=stall)

        async with AsyncStack(contentstack_config) as stack:
            task = asyncio.create_task(stack.content_type("product").entry().query().find())
            await asyncio.wait_for(started.wait(), timeout=1)
            task.cancel()

            with pytest.raises(asyncio.CancelledError):
                await task

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_sync(self, contentstack_config: ContentstackConfig) -> None:
        """Test sync pages over the async stack."""
        respx.get(f"{BASE_URL}/stacks/sync").mock(
            side_effect=[
                Response(
                    200,
                    json={
                        "items": [{"type": "entry_published", "data": {"uid": "blt1"}}],
                        "pagination_token": "page-2",
                    },
                ),
                Response(200, json={"items": [], "sync_token": "done"}),
            ]
        )
        sync_stack = SyncStack()

        async with AsyncStack(contentstack_config) as stack:
            pages = [page async for page in stack.sync(sync_stack)]

        assert [len(p.items) for p in pages] == [1, 0]
        assert pages[0].items[0].uid == "blt1"
        assert sync_stack.sync_token == "done"

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self, contentstack_config: ContentstackConfig) -> None:
        """Test an injected async client stays open."""
        http_client = httpx.AsyncClient()
        async with AsyncStack(contentstack_config, http_client=http_client):
            pass
        assert not http_client.is_closed
        await http_client.aclose()
