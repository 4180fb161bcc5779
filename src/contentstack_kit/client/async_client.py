"""Asynchronous stack client.

Non-blocking I/O for web applications and concurrent fetching of many
queries.
"""

import logging
from collections.abc import AsyncIterator, Iterable
from typing import TYPE_CHECKING, Any

import httpx

from ..exceptions import CacheError, ServerError, TransportError
from ..exceptions import (
    ConnectionError as ContentstackConnectionError,
)
from ..exceptions import (
    TimeoutError as ContentstackTimeoutError,
)
from ..models.enums import CachePolicy, ResponseSource
from ..models.response.response import ContentstackResponse
from ..protocols import (
    AsyncHTTPClient,
    AuthProvider,
    ConfigProvider,
    ResponseCache,
    ResponseParser,
)
from .base import BaseStack, PreparedRequest

if TYPE_CHECKING:
    from ..models.request.query import BaseQuery
    from ..models.response.decodable import ModelRegistry
    from ..operations.sync import SyncPage, SyncStack, SyncType

logger = logging.getLogger(__name__)


class AsyncStack(BaseStack):
    """Asynchronous client for a Contentstack stack.

    Queries built from an ``AsyncStack`` return awaitables from ``find()``
    and async iterators from ``find_iter()``.

    Example:
        ```python
        import asyncio
        from contentstack_kit import AsyncStack, ContentstackConfig

        async def main():
            config = ContentstackConfig(
                api_key="blt123",
                delivery_token="cs-token",
                environment="production",
            )

            async with AsyncStack(config) as stack:
                response = await stack.content_type("product").entry().query().find()
                print(len(response.items))

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        config: ConfigProvider,
        http_client: AsyncHTTPClient | None = None,
        auth: AuthProvider | None = None,
        parser: ResponseParser | None = None,
        cache: ResponseCache | None = None,
        registry: "ModelRegistry | None" = None,
    ) -> None:
        """Initialize the asynchronous stack with dependency injection.

        Args:
            config: Configuration provider (typically ContentstackConfig)
            http_client: Async HTTP client (defaults to httpx.AsyncClient with pooling)
            auth: Credential provider (passed to BaseStack)
            parser: Response parser (passed to BaseStack)
            cache: Response cache (passed to BaseStack)
            registry: Model registry (passed to BaseStack)
        """
        super().__init__(config, auth=auth, parser=parser, cache=cache, registry=registry)

        self._client: AsyncHTTPClient | httpx.AsyncClient = (
            http_client or self._create_default_http_client()
        )
        self._owns_client = http_client is None

    def _create_default_http_client(self) -> httpx.AsyncClient:
        """Create default async HTTP client with connection pooling."""
        return httpx.AsyncClient(
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
            limits=httpx.Limits(
                max_connections=self.config.max_connections,
                max_keepalive_connections=self.config.max_connections,
            ),
        )

    async def __aenter__(self) -> "AsyncStack":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client and release connections.

        Only closes the client if it was created by this instance.
        """
        if self._owns_client:
            await self._client.aclose()
        logger.info("Closed asynchronous stack")

    # Transport

    async def _send(self, url: str, headers: dict[str, str]) -> bytes:
        """GET ``url`` with automatic retry and return the response body.

        Cancellation of the awaiting task propagates unchanged.
        """
        retry_decorator = self._create_retry_decorator()

        @retry_decorator  # type: ignore[untyped-decorator]
        async def _do_request() -> bytes:
            logger.debug(f"GET {url}")
            try:
                response = await self._client.request("GET", url, headers=headers)
            except httpx.ConnectError as e:
                raise ContentstackConnectionError(f"Failed to connect to {self.base_url}: {e}") from e
            except httpx.TimeoutException as e:
                raise ContentstackTimeoutError(
                    f"Request timed out after {self.config.timeout}s: {e}"
                ) from e
            except (httpx.NetworkError, httpx.RemoteProtocolError) as e:
                raise ContentstackConnectionError(
                    f"Connection to {self.base_url} failed: {type(e).__name__}: {e}"
                ) from e
            except httpx.TransportError as e:
                raise TransportError(f"Transport failure: {type(e).__name__}: {e}") from e

            if not response.is_success:
                self._handle_error_response(response, url)

            logger.info(f"Success: GET ({response.status_code}) {url}")
            return response.content

        return await _do_request()  # type: ignore[no-any-return]

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Make a GET request and return the JSON envelope (bypasses the cache)."""
        body = await self._send(self._build_url(path, params), self._get_headers(headers))
        return self.parser.load(body)

    # Cache policies

    async def _from_network(self, request: PreparedRequest) -> ContentstackResponse[Any]:
        body = await self._send(request.url, request.headers)
        response = self._materialize(request, body, ResponseSource.NETWORK)
        self.cache.set(request.url, body)
        return response

    def _from_cache(self, request: PreparedRequest) -> ContentstackResponse[Any] | None:
        body = self.cache.get(request.url)
        if body is None:
            return None
        return self._materialize(request, body, ResponseSource.CACHE)

    async def _execute(self, request: PreparedRequest) -> AsyncIterator[ContentstackResponse[Any]]:
        policy = request.cache_policy

        if policy == CachePolicy.NETWORK_ONLY:
            yield await self._from_network(request)

        elif policy == CachePolicy.CACHE_ONLY:
            cached = self._from_cache(request)
            if cached is None:
                raise CacheError(f"No cached response for {request.url}")
            yield cached

        elif policy == CachePolicy.CACHE_ELSE_NETWORK:
            cached = self._from_cache(request)
            yield cached if cached is not None else await self._from_network(request)

        elif policy == CachePolicy.NETWORK_ELSE_CACHE:
            try:
                response = await self._from_network(request)
            except (TransportError, ServerError) as e:
                cached = self._from_cache(request)
                if cached is None:
                    raise
                logger.warning(f"Network request failed ({e}), serving cached response")
                response = cached
            yield response

        elif policy == CachePolicy.CACHE_THEN_NETWORK:
            cached = self._from_cache(request)
            if cached is not None:
                yield cached
            else:
                logger.debug(f"No cached response for {request.url}, waiting for network")
            yield await self._from_network(request)

    async def find_iter(self, query: "BaseQuery") -> AsyncIterator[ContentstackResponse[Any]]:
        """Execute a query and yield every delivered response.

        Under ``CachePolicy.CACHE_THEN_NETWORK`` a cached response is yielded
        before the network response.
        """
        async for response in self._execute(self._prepare(query)):
            yield response

    async def find(self, query: "BaseQuery") -> ContentstackResponse[Any]:
        """Execute a query and return the final response."""
        responses = [response async for response in self.find_iter(query)]
        return responses[-1]

    async def fetch_iter(
        self, query: "BaseQuery", uid: str
    ) -> AsyncIterator[ContentstackResponse[Any]]:
        """Fetch a single resource by UID and yield every delivered response."""
        async for response in self._execute(self._prepare(query, uid=uid)):
            yield response

    async def fetch(self, query: "BaseQuery", uid: str) -> Any:
        """Fetch a single resource by UID and return the decoded item.

        Raises:
            InvalidUIDError: If the response carried no item
        """
        responses = [r async for r in self.fetch_iter(query, uid)]
        return responses[-1].items[0]

    # Sync

    def sync(
        self,
        sync_stack: "SyncStack | None" = None,
        sync_types: "Iterable[SyncType]" = (),
    ) -> AsyncIterator["SyncPage"]:
        """Iterate asynchronously over sync pages until the sync token is delivered.

        Example:
            >>> async for page in stack.sync():
            ...     apply(page.items)
        """
        from ..operations.sync import SyncStack, sync_pages_async

        return sync_pages_async(
            self, sync_stack if sync_stack is not None else SyncStack(), sync_types
        )
