"""Configuration models for contentstack-kit.

Settings can be supplied explicitly, through environment variables
prefixed with ``CONTENTSTACK_`` or through ``.env`` files.
Nested retry settings use ``__`` as delimiter, e.g.
``CONTENTSTACK_RETRY__MAX_ATTEMPTS=5``.
"""

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import CachePolicy, Region

DEFAULT_HOST = "cdn.contentstack.io"


class RetryConfig(BaseModel):
    """Retry behaviour of the transport layer.

    Only server errors (5xx) and connection failures are retried;
    API errors in the 4xx range are returned immediately.
    """

    max_attempts: int = Field(default=3, ge=1, le=10, description="Total attempts per request")
    initial_wait: float = Field(default=1.0, ge=0.1, le=60.0, description="Initial wait in seconds")
    max_wait: float = Field(default=30.0, ge=1.0, le=300.0, description="Maximum wait in seconds")
    exponential_base: float = Field(default=2.0, ge=1.0, le=10.0, description="Backoff multiplier")
    retry_on_status: set[int] = Field(
        default_factory=lambda: {500, 502, 503, 504},
        description="HTTP status codes that trigger a retry",
    )


class ContentstackConfig(BaseSettings):
    """Configuration of a stack connection.

    Example:
        >>> config = ContentstackConfig(
        ...     api_key="blt123",
        ...     delivery_token="cs-token",
        ...     environment="production",
        ... )
        >>> config.get_base_url()
        'https://cdn.contentstack.io/v3'
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTENTSTACK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str = Field(..., min_length=1, description="Stack API key")
    delivery_token: SecretStr = Field(..., description="Delivery token of the environment")
    environment: str = Field(..., min_length=1, description="Publishing environment")
    region: Region = Field(default=Region.US, description="Data-center region")
    host: str | None = Field(default=None, description="Explicit host, overrides region")
    api_version: str = Field(default="v3", description="Content Delivery API version")
    branch: str | None = Field(default=None, description="Branch UID sent as a header")
    early_access: list[str] = Field(default_factory=list, description="Early-access features")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    max_connections: int = Field(default=10, ge=1, description="Connection pool size")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    retry: RetryConfig = Field(default_factory=RetryConfig)
    cache_policy: CachePolicy = Field(default=CachePolicy.NETWORK_ONLY)

    @field_validator("host")
    @classmethod
    def _strip_host(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        for scheme in ("https://", "http://"):
            if value.startswith(scheme):
                value = value[len(scheme):]
        return value or None

    def get_host(self) -> str:
        """Resolve the API host from the explicit host or the region.

        Returns:
            Host name without scheme
        """
        if self.host and self.host != DEFAULT_HOST:
            return self.host
        if self.region == Region.US:
            return DEFAULT_HOST
        return f"{self.region.value}-cdn.contentstack.com"

    def get_base_url(self) -> str:
        """Get the versioned base URL of the Content Delivery API."""
        return f"https://{self.get_host()}/{self.api_version}"

    def get_delivery_token(self) -> str:
        """Get the delivery token as plain text."""
        return self.delivery_token.get_secret_value()
