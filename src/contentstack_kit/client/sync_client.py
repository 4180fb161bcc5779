"""Synchronous stack client.

Blocking I/O for scripts, build steps and applications that fetch one
page at a time.
"""

import logging
from collections.abc import Iterable, Iterator
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
from ..protocols import AuthProvider, ConfigProvider, HTTPClient, ResponseCache, ResponseParser
from .base import BaseStack, PreparedRequest

if TYPE_CHECKING:
    from ..models.request.query import BaseQuery
    from ..models.response.decodable import ModelRegistry
    from ..operations.sync import SyncPage, SyncStack, SyncType

logger = logging.getLogger(__name__)


class Stack(BaseStack):
    """Synchronous client for a Contentstack stack.

    Example:
        ```python
        from contentstack_kit import ContentstackConfig, Operation, Stack

        config = ContentstackConfig(
            api_key="blt123",
            delivery_token="cs-token",
            environment="production",
        )

        with Stack(config) as stack:
            response = (stack.content_type("product").entry().query()
                        .where("price", Operation.is_less_than(100))
                        .find())
            for entry in response.items:
                print(entry.title)
        ```
    """

    def __init__(
        self,
        config: ConfigProvider,
        http_client: HTTPClient | None = None,
        auth: AuthProvider | None = None,
        parser: ResponseParser | None = None,
        cache: ResponseCache | None = None,
        registry: "ModelRegistry | None" = None,
    ) -> None:
        """Initialize the synchronous stack with dependency injection.

        Args:
            config: Configuration provider (typically ContentstackConfig)
            http_client: HTTP client (defaults to httpx.Client with pooling)
            auth: Credential provider (passed to BaseStack)
            parser: Response parser (passed to BaseStack)
            cache: Response cache (passed to BaseStack)
            registry: Model registry (passed to BaseStack)
        """
        super().__init__(config, auth=auth, parser=parser, cache=cache, registry=registry)

        self._client: HTTPClient | httpx.Client = (
            http_client or self._create_default_http_client()
        )
        self._owns_client = http_client is None

    def _create_default_http_client(self) -> httpx.Client:
        """Create default HTTP client with connection pooling."""
        return httpx.Client(
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
            limits=httpx.Limits(
                max_connections=self.config.max_connections,
                max_keepalive_connections=self.config.max_connections,
            ),
        )

    def __enter__(self) -> "Stack":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client and release connections.

        Only closes the client if it was created by this instance.
        """
        if self._owns_client:
            self._client.close()
        logger.info("Closed synchronous stack")

    # Transport

    def _send(self, url: str, headers: dict[str, str]) -> bytes:
        """GET ``url`` with automatic retry and return the response body.

        Raises:
            APIError: On an error envelope (after retries for 5xx)
            HTTPStatusError: On a non-2xx response without error envelope
            ConnectionError: On connection failures (after retries)
            TimeoutError: On request timeout
            TransportError: On any other transport failure
        """
        retry_decorator = self._create_retry_decorator()

        @retry_decorator  # type: ignore[untyped-decorator]
        def _do_request() -> bytes:
            logger.debug(f"GET {url}")
            try:
                response = self._client.request("GET", url, headers=headers)
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

        return _do_request()  # type: ignore[no-any-return]

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Make a GET request and return the JSON envelope.

        Bypasses the response cache.

        Args:
            path: Endpoint path relative to the versioned base URL
            params: URL parameters
            headers: Additional headers

        Returns:
            Response JSON data
        """
        body = self._send(self._build_url(path, params), self._get_headers(headers))
        return self.parser.load(body)

    # Cache policies

    def _from_network(self, request: PreparedRequest) -> ContentstackResponse[Any]:
        body = self._send(request.url, request.headers)
        response = self._materialize(request, body, ResponseSource.NETWORK)
        self.cache.set(request.url, body)
        return response

    def _from_cache(self, request: PreparedRequest) -> ContentstackResponse[Any] | None:
        body = self.cache.get(request.url)
        if body is None:
            return None
        return self._materialize(request, body, ResponseSource.CACHE)

    def _execute(self, request: PreparedRequest) -> Iterator[ContentstackResponse[Any]]:
        policy = request.cache_policy

        if policy == CachePolicy.NETWORK_ONLY:
            yield self._from_network(request)

        elif policy == CachePolicy.CACHE_ONLY:
            cached = self._from_cache(request)
            if cached is None:
                raise CacheError(f"No cached response for {request.url}")
            yield cached

        elif policy == CachePolicy.CACHE_ELSE_NETWORK:
            cached = self._from_cache(request)
            yield cached if cached is not None else self._from_network(request)

        elif policy == CachePolicy.NETWORK_ELSE_CACHE:
            try:
                response = self._from_network(request)
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
            yield self._from_network(request)

    def find_iter(self, query: "BaseQuery") -> Iterator[ContentstackResponse[Any]]:
        """Execute a query and yield every delivered response.

        Under ``CachePolicy.CACHE_THEN_NETWORK`` a cached response is yielded
        before the network response.
        """
        yield from self._execute(self._prepare(query))

    def find(self, query: "BaseQuery") -> ContentstackResponse[Any]:
        """Execute a query and return the final response.

        Raises:
            ContentstackError: On any failure
        """
        return list(self.find_iter(query))[-1]

    def fetch_iter(self, query: "BaseQuery", uid: str) -> Iterator[ContentstackResponse[Any]]:
        """Fetch a single resource by UID and yield every delivered response."""
        yield from self._execute(self._prepare(query, uid=uid))

    def fetch(self, query: "BaseQuery", uid: str) -> Any:
        """Fetch a single resource by UID and return the decoded item.

        Raises:
            InvalidUIDError: If the response carried no item
        """
        return list(self.fetch_iter(query, uid))[-1].items[0]

    # Sync

    def sync(
        self,
        sync_stack: "SyncStack | None" = None,
        sync_types: "Iterable[SyncType]" = (),
    ) -> Iterator["SyncPage"]:
        """Iterate over sync pages until the sync token is delivered.

        Args:
            sync_stack: Cursor to continue from (a fresh initial sync if omitted)
            sync_types: Restrictions applied to an initial sync

        Returns:
            Iterator of pages; ``sync_stack`` is advanced as pages are consumed
        """
        from ..operations.sync import SyncStack, sync_pages

        return sync_pages(self, sync_stack if sync_stack is not None else SyncStack(), sync_types)
