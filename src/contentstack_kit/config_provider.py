"""Configuration factory and loading helpers.

Provides several ways to build a :class:`ContentstackConfig`:
explicit parameters, dictionaries, environment variables, ``.env`` files
and layered merges of existing configurations.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .models.config import ContentstackConfig, RetryConfig

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_PATHS = [".env", ".env.local", "~/.config/contentstack/.env"]


class ConfigFactory:
    """Factory for creating stack configurations.

    Example:
        >>> config = ConfigFactory.create(
        ...     api_key="blt123",
        ...     delivery_token="cs-token",
        ...     environment="production",
        ... )
        >>> config = ConfigFactory.from_env(search_paths=[".env.local", ".env"])
    """

    @staticmethod
    def _build(**kwargs: Any) -> ContentstackConfig:
        try:
            return ContentstackConfig(**kwargs)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def create(
        cls,
        *,
        api_key: str,
        delivery_token: str,
        environment: str,
        retry: RetryConfig | dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> ContentstackConfig:
        """Create a configuration from explicit parameters.

        Args:
            api_key: Stack API key
            delivery_token: Delivery token
            environment: Publishing environment
            retry: Retry configuration or dictionary of retry settings
            **kwargs: Any other ContentstackConfig field

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If any value fails validation
        """
        if isinstance(retry, dict):
            try:
                retry = RetryConfig(**retry)
            except PydanticValidationError as e:
                raise ConfigurationError(f"Invalid configuration: {e}") from e
        if retry is not None:
            kwargs["retry"] = retry

        return cls._build(
            api_key=api_key,
            delivery_token=delivery_token,
            environment=environment,
            _env_file=None,
            **kwargs,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentstackConfig:
        """Create a configuration from a dictionary.

        Raises:
            ConfigurationError: If the dictionary fails validation
        """
        return cls._build(_env_file=None, **data)

    @classmethod
    def from_environment_only(cls) -> ContentstackConfig:
        """Create a configuration from ``CONTENTSTACK_*`` environment variables only.

        Raises:
            ConfigurationError: If required variables are missing
        """
        return cls._build(_env_file=None)

    @classmethod
    def from_env_file(cls, path: str | Path, *, required: bool = False) -> ContentstackConfig:
        """Create a configuration from a specific ``.env`` file.

        Environment variables take precedence over values from the file.

        Args:
            path: Path to the ``.env`` file
            required: Raise if the file does not exist instead of falling
                back to environment variables

        Raises:
            ConfigurationError: If the file is required but missing, or
                validation fails
        """
        env_path = Path(path).expanduser()
        if not env_path.is_file():
            if required:
                raise ConfigurationError(f".env file not found: {env_path}")
            logger.debug(f".env file {env_path} not found, using environment variables")
            return cls.from_environment_only()

        logger.debug(f"Loading configuration from {env_path}")
        return cls._build(_env_file=env_path)

    @classmethod
    def from_env(
        cls,
        search_paths: list[str] | None = None,
        *,
        required: bool = False,
    ) -> ContentstackConfig:
        """Create a configuration from the first ``.env`` file found.

        Args:
            search_paths: Candidate paths in priority order
                (defaults to ``.env``, ``.env.local``, ``~/.config/contentstack/.env``)
            required: Raise if none of the paths exists

        Raises:
            ConfigurationError: If no file is found and one is required,
                or validation fails
        """
        paths = search_paths or DEFAULT_SEARCH_PATHS
        for candidate in paths:
            env_path = Path(candidate).expanduser()
            if env_path.is_file():
                return cls.from_env_file(env_path, required=True)

        if required:
            raise ConfigurationError(f"No .env file found in search paths: {paths}")
        return cls.from_environment_only()

    @staticmethod
    def merge(
        *configs: ContentstackConfig,
        base: ContentstackConfig | None = None,
    ) -> ContentstackConfig:
        """Merge configurations, later configurations winning.

        Only fields that were explicitly set on a later configuration
        override earlier values.

        Raises:
            ValueError: If no configuration is given
        """
        layers = ([base] if base is not None else []) + list(configs)
        if not layers:
            raise ValueError("At least one config is required for merge")

        data = layers[0].model_dump()
        for layer in layers[1:]:
            data.update(layer.model_dump(include=layer.model_fields_set))

        return ConfigFactory.from_dict(data)


def load_config(path: str | Path | None = None, *, required: bool = False) -> ContentstackConfig:
    """Load a configuration from a ``.env`` file or the default search paths."""
    if path is not None:
        return ConfigFactory.from_env_file(path, required=required)
    return ConfigFactory.from_env(required=required)


def create_config(**kwargs: Any) -> ContentstackConfig:
    """Create a configuration from keyword arguments."""
    return ConfigFactory.create(**kwargs)
