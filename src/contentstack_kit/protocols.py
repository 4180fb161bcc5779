"""Protocol definitions for dependency injection.

Stacks depend on these interfaces rather than on concrete classes, so
tests and applications can substitute their own transport, credentials,
parser or cache.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import httpx

    from .models.config import RetryConfig
    from .models.enums import CachePolicy, Region, ResourceKind, ResponseSource
    from .models.response.response import ContentstackResponse


@runtime_checkable
class ConfigProvider(Protocol):
    """Settings a stack needs to talk to the Content Delivery API."""

    api_key: str
    environment: str
    region: "Region"
    branch: str | None
    early_access: list[str]
    timeout: float
    max_connections: int
    verify_ssl: bool
    cache_policy: "CachePolicy"
    retry: "RetryConfig"

    def get_base_url(self) -> str:
        """Versioned base URL, e.g. ``https://cdn.contentstack.io/v3``."""
        ...

    def get_delivery_token(self) -> str:
        """Delivery token as plain text."""
        ...


@runtime_checkable
class AuthProvider(Protocol):
    """Source of the credential headers sent with every request."""

    def get_headers(self) -> dict[str, str]:
        """Credential headers."""
        ...

    def validate_credentials(self) -> bool:
        """Whether the credentials are present."""
        ...


@runtime_checkable
class HTTPClient(Protocol):
    """Synchronous HTTP transport (satisfied by ``httpx.Client``)."""

    def request(self, method: str, url: str, **kwargs: Any) -> "httpx.Response":
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class AsyncHTTPClient(Protocol):
    """Asynchronous HTTP transport (satisfied by ``httpx.AsyncClient``)."""

    async def request(self, method: str, url: str, **kwargs: Any) -> "httpx.Response":
        ...

    async def aclose(self) -> None:
        ...


@runtime_checkable
class ResponseParser(Protocol):
    """Turns response bytes into decoded responses."""

    def load(self, body: bytes) -> dict[str, Any]:
        """Parse bytes into the JSON envelope."""
        ...

    def parse(
        self,
        body: bytes,
        *,
        kind: "ResourceKind",
        model: type[Any] | None = None,
        include_paths: Any = (),
        content_type_uid: str | None = None,
        uid: str | None = None,
        source: "ResponseSource",
    ) -> "ContentstackResponse[Any]":
        """Materialize a response body."""
        ...


@runtime_checkable
class ResponseCache(Protocol):
    """Store of successful response bodies keyed by request URL."""

    def get(self, key: str) -> bytes | None:
        ...

    def set(self, key: str, body: bytes) -> None:
        ...

    def clear(self) -> None:
        ...
