"""Base stack shared by the synchronous and asynchronous clients.

This module holds everything that does not perform I/O: URL and header
construction, error envelope mapping, the retry policy, request
preparation from queries and the resource façade factories.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, NoReturn
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from ..__version__ import __version__
from ..auth.stack_auth import StackAuth
from ..cache.response_cache import InMemoryResponseCache
from ..exceptions import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ErrorEnvelope,
    HTTPStatusError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from ..exceptions import (
    ConnectionError as ContentstackConnectionError,
)
from ..models.enums import CachePolicy, ResourceKind, ResponseSource
from ..models.request.encoding import encode
from ..models.response.decodable import ModelRegistry
from ..models.response.materializer import ResponseMaterializer
from ..models.response.response import ContentstackResponse
from ..protocols import AuthProvider, ConfigProvider, ResponseCache, ResponseParser

if TYPE_CHECKING:
    from ..models.request.query import BaseQuery
    from ..resources.asset import Asset
    from ..resources.content_type import ContentType
    from ..resources.global_field import GlobalField
    from ..resources.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

USER_AGENT = f"contentstack-kit-python/{__version__}"

# Characters left unescaped in the JSON filter; matches the parameter value set
_SAFE_QUERY_CHARS = "-._~!$'()*,;:@/?"


@dataclass
class PreparedRequest:
    """A query turned into everything needed to execute and decode it."""

    url: str
    headers: dict[str, str]
    kind: ResourceKind
    cache_policy: CachePolicy
    model: type[Any] | None = None
    include_paths: list[str] = field(default_factory=list)
    content_type_uid: str | None = None
    uid: str | None = None
    skip: int | None = None
    limit: int | None = None


class BaseStack:
    """Base class for Content Delivery API stacks.

    Provides for both :class:`Stack` and :class:`AsyncStack`:
    - credential and early-access headers
    - URL construction with the environment appended to every request
    - mapping of error envelopes to exceptions
    - retry with exponential backoff on server and connection errors
    - façades for content types, assets, global fields and taxonomies

    Not intended to be used directly.
    """

    def __init__(
        self,
        config: ConfigProvider,
        *,
        auth: AuthProvider | None = None,
        parser: ResponseParser | None = None,
        cache: ResponseCache | None = None,
        registry: ModelRegistry | None = None,
    ) -> None:
        """Initialize the base stack with dependency injection.

        Args:
            config: Configuration provider (typically ContentstackConfig)
            auth: Credential provider (defaults to StackAuth)
            parser: Response parser (defaults to ResponseMaterializer)
            cache: Response cache (defaults to InMemoryResponseCache)
            registry: Models for typed reference resolution

        Raises:
            ConfigurationError: If the credentials are empty
        """
        self.config = config
        self.base_url = config.get_base_url()
        self.auth: AuthProvider = auth or StackAuth(config.api_key, config.get_delivery_token())

        if not self.auth.validate_credentials():
            raise ConfigurationError("Stack API key and delivery token are required")

        self.registry = registry if registry is not None else ModelRegistry()
        self.parser: ResponseParser = (
            parser if parser is not None else ResponseMaterializer(self.registry)
        )
        self.cache: ResponseCache = cache if cache is not None else InMemoryResponseCache()

        logger.info(
            f"Initialized stack for {self.base_url} "
            f"(environment: {config.environment}, branch: {config.branch or 'main'})"
        )

    # Façades

    def content_type(self, uid: str | None = None) -> "ContentType":
        """Content type façade; ``uid`` is required for fetches and entries."""
        from ..resources.content_type import ContentType

        return ContentType(self, uid)

    def asset(self, uid: str | None = None) -> "Asset":
        """Asset façade; ``uid`` is required for fetches."""
        from ..resources.asset import Asset

        return Asset(self, uid)

    def global_field(self, uid: str | None = None) -> "GlobalField":
        """Global field façade; ``uid`` is required for fetches."""
        from ..resources.global_field import GlobalField

        return GlobalField(self, uid)

    def taxonomy(self) -> "Taxonomy":
        """Taxonomy façade for querying entries by taxonomy terms."""
        from ..resources.taxonomy import Taxonomy

        return Taxonomy(self)

    def register_model(self, content_type_uid: str, model: type[Any]) -> None:
        """Decode entries of a content type into ``model``.

        Applies to queries on that content type and to resolved references.
        """
        self.registry.register(content_type_uid, model)

    # Request construction

    def _get_headers(self, extra_headers: dict[str, str] | None = None) -> dict[str, str]:
        """Build request headers with credentials.

        Args:
            extra_headers: Additional headers to include

        Returns:
            Complete headers dictionary
        """
        headers = {
            "Accept": "application/json",
            "X-User-Agent": USER_AGENT,
            **self.auth.get_headers(),
        }
        if self.config.branch:
            headers["branch"] = self.config.branch
        if self.config.early_access:
            headers["x-header-ea"] = ",".join(self.config.early_access)

        if extra_headers:
            headers.update(extra_headers)

        return headers

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build the full request URL.

        The JSON filter comes first, then the remaining parameters in
        canonical order, then the environment.

        Args:
            path: Endpoint path (e.g. ``content_types/product/entries``)
            params: Parameters, including ``query`` as rendered JSON

        Returns:
            Complete URL
        """
        remaining = dict(params or {})
        components = []

        filter_json = remaining.pop("query", None)
        if filter_json:
            components.append(f"query={quote(filter_json, safe=_SAFE_QUERY_CHARS)}")

        environment = remaining.pop("environment", self.config.environment)
        encoded = encode(remaining)
        if encoded:
            components.append(encoded)
        components.append(f"environment={quote(str(environment), safe='')}")

        return f"{self.base_url}/{path.strip('/')}?{'&'.join(components)}"

    def _prepare(self, query: "BaseQuery", uid: str | None = None) -> PreparedRequest:
        """Turn a query into a prepared request.

        Args:
            query: Query to execute
            uid: UID of a single resource to fetch instead of a list

        Returns:
            Prepared request
        """
        path = query.path if uid is None else f"{query.path}/{uid}"
        params = query.to_params()
        logger.debug(f"Prepared {query.resource_kind.value} request for {path} params={params}")

        return PreparedRequest(
            url=self._build_url(path, params),
            headers=self._get_headers(query.headers),
            kind=query.resource_kind,
            cache_policy=query.cache_policy or self.config.cache_policy,
            model=query.model,
            include_paths=query.included_references,
            content_type_uid=getattr(query, "content_type_uid", None),
            uid=uid,
            skip=query.uri_parameters.get("skip"),
            limit=query.uri_parameters.get("limit"),
        )

    # Response handling

    def _materialize(
        self, request: PreparedRequest, body: bytes, source: ResponseSource
    ) -> ContentstackResponse[Any]:
        response = self.parser.parse(
            body,
            kind=request.kind,
            model=request.model,
            include_paths=request.include_paths,
            content_type_uid=request.content_type_uid,
            uid=request.uid,
            source=source,
        )
        if response.skip is None:
            response.skip = request.skip
        if response.limit is None:
            response.limit = request.limit
        return response

    def _handle_error_response(self, response: httpx.Response, url: str) -> NoReturn:
        """Raise the exception matching an error response.

        Args:
            response: HTTPX response object
            url: Request URL, for logging

        Raises:
            APIError subclass if the body is an error envelope,
            HTTPStatusError otherwise
        """
        status_code = response.status_code
        body = response.content

        try:
            envelope = ErrorEnvelope.model_validate_json(body)
        except PydanticValidationError:
            logger.error(f"Errored: GET ({status_code}) {url}")
            raise HTTPStatusError(
                f"Unexpected response (HTTP {status_code})",
                status_code=status_code,
                body=body,
                details={"body_preview": body[:500].decode("utf-8", errors="replace")},
            ) from None

        logger.error(f"Errored: GET ({status_code}) {url} Message: {envelope.error_message}")

        message = envelope.error_message
        described = envelope.errors.describe()
        if described:
            message = f"{message}\n{described}"

        kwargs: dict[str, Any] = {
            "error_code": envelope.error_code,
            "error_message": envelope.error_message,
            "error_info": envelope.errors,
            "status_code": status_code,
            "details": {"errors": envelope.errors.model_dump(exclude_none=True)},
        }

        if status_code in (400, 422):
            raise ValidationError(message, **kwargs)
        elif status_code in (401, 412):
            raise AuthenticationError(message, **kwargs)
        elif status_code == 403:
            raise AuthorizationError(message, **kwargs)
        elif status_code == 404:
            raise NotFoundError(message, **kwargs)
        elif status_code == 429:
            retry_after = response.headers.get("Retry-After")
            retry_seconds = int(retry_after) if retry_after and retry_after.isdigit() else None
            raise RateLimitError(message, retry_after=retry_seconds, **kwargs)
        elif 500 <= status_code < 600:
            raise ServerError(message, **kwargs)
        else:
            raise APIError(message, **kwargs)

    def _is_retryable(self, exc: BaseException) -> bool:
        if isinstance(exc, ContentstackConnectionError):
            return True
        if isinstance(exc, (ServerError, HTTPStatusError)):
            return exc.status_code in self.config.retry.retry_on_status
        return False

    def _create_retry_decorator(self) -> Any:
        """Create a retry decorator based on configuration.

        Returns:
            Configured tenacity retry decorator
        """
        retry_config = self.config.retry

        return retry(
            stop=stop_after_attempt(retry_config.max_attempts),
            wait=wait_exponential(
                multiplier=retry_config.exponential_base,
                min=retry_config.initial_wait,
                max=retry_config.max_wait,
            ),
            retry=retry_if_exception(self._is_retryable),
            reraise=True,
        )
