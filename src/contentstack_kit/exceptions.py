"""Exception hierarchy for contentstack-kit.

All errors raised by the SDK derive from :class:`ContentstackError`.
The hierarchy separates local failures (configuration) from failures past
the network boundary (transport, API, decode, cache) so callers can react
to each kind independently.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ContentstackError(Exception):
    """Base exception for all contentstack-kit errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# Local, pre-network errors


class ConfigurationError(ContentstackError):
    """Invalid configuration or builder argument.

    Raised before any I/O: missing UIDs, conflicting sync tokens,
    out-of-range pagination values, invalid settings.
    """


# Transport errors


class TransportError(ContentstackError):
    """Failure in the HTTP transport layer."""


class ConnectionError(TransportError):  # noqa: A001
    """Unable to connect to the Content Delivery API."""


class TimeoutError(TransportError):  # noqa: A001
    """Request exceeded the configured timeout."""


class HTTPStatusError(TransportError):
    """Non-2xx response whose body is not a decodable error envelope."""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: bytes = b"",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.body = body


# API errors


class ErrorInfo(BaseModel):
    """Detailed error information from the ``errors`` object of an error envelope.

    ``authtoken`` is a legacy key that fills the same slot as ``api_key``.
    """

    api_key: list[str] | None = None
    access_token: list[str] | None = None
    environment: list[str] | None = None
    uid: list[str] | None = None

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _map_legacy_authtoken(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("api_key") is None and "authtoken" in data:
            data = {**data, "api_key": data["authtoken"]}
        return data

    def describe(self) -> str:
        """Render the populated slots as a short multi-line description."""
        lines = []
        if self.api_key:
            lines.append(f"API Key {', '.join(self.api_key)}")
        if self.access_token:
            lines.append(f"Delivery token {', '.join(self.access_token)}")
        if self.environment:
            lines.append(f"Environment {', '.join(self.environment)}")
        if self.uid:
            lines.append(f"UID {', '.join(self.uid)}")
        return "\n".join(lines)


class ErrorEnvelope(BaseModel):
    """Error envelope returned by the Content Delivery API."""

    error_message: str
    error_code: int
    errors: ErrorInfo = Field(default_factory=ErrorInfo)


class APIError(ContentstackError):
    """Structured error returned by the Content Delivery API.

    Attributes:
        error_code: Contentstack error code
        error_message: Message from the error envelope
        error_info: Structured per-credential/per-field error information
        status_code: HTTP status code
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: int,
        error_message: str,
        error_info: ErrorInfo | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.error_code = error_code
        self.error_message = error_message
        self.error_info = error_info or ErrorInfo()
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status_code={self.status_code}, "
            f"error_code={self.error_code}, error_message={self.error_message!r})"
        )


class ValidationError(APIError):
    """Request rejected as invalid (HTTP 400 or 422)."""


class AuthenticationError(APIError):
    """Invalid API key or delivery token (HTTP 401 or 412)."""


class AuthorizationError(APIError):
    """Credentials lack access to the resource (HTTP 403)."""


class NotFoundError(APIError):
    """Requested resource does not exist (HTTP 404)."""


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429).

    Attributes:
        retry_after: Seconds to wait before retrying, if the server said so
    """

    def __init__(self, message: str, *, retry_after: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(APIError):
    """Server-side failure (HTTP 5xx)."""


# Decode errors


class DecodeError(ContentstackError):
    """Response could not be materialized."""


class UnparseableResponseError(DecodeError):
    """Response body is not valid JSON.

    Attributes:
        body: Raw response bytes
    """

    def __init__(self, message: str, body: bytes = b"", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)
        self.body = body


class SchemaMismatchError(DecodeError):
    """Response parsed as JSON but does not have the expected shape."""


class ItemDecodeError(SchemaMismatchError):
    """A single item of a page failed to decode.

    Attributes:
        index: Position of the failing item in the envelope array
    """

    def __init__(self, message: str, index: int, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)
        self.index = index


class SyncError(SchemaMismatchError):
    """Sync envelope carries both or neither of the sync/pagination tokens."""


class InvalidUIDError(DecodeError):
    """A single-resource fetch returned no item for the requested UID."""

    def __init__(self, uid: str) -> None:
        super().__init__(f"The uid {uid} is not valid.", details={"uid": uid})
        self.uid = uid


# Cache errors


class CacheError(ContentstackError):
    """No cached response available for the request."""
