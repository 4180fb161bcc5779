"""Stack credential authentication.

The Content Delivery API authenticates every request with two headers:
the stack API key and the delivery token of the publishing environment.
"""

import logging

logger = logging.getLogger(__name__)


class StackAuth:
    """Credential provider for stack API key and delivery token.

    Example:
        >>> auth = StackAuth("blt123", "cs-token")
        >>> auth.get_headers()
        {'api_key': 'blt123', 'access_token': 'cs-token'}
    """

    def __init__(self, api_key: str, delivery_token: str) -> None:
        """Initialize with stack credentials.

        Args:
            api_key: Stack API key
            delivery_token: Delivery token of the environment
        """
        self.api_key = api_key
        self._delivery_token = delivery_token

    def get_headers(self) -> dict[str, str]:
        """Get the credential headers for a request."""
        return {"api_key": self.api_key, "access_token": self._delivery_token}

    def validate_credentials(self) -> bool:
        """Check that both credentials are present.

        Returns:
            True if neither the API key nor the delivery token is blank
        """
        valid = bool(self.api_key.strip()) and bool(self._delivery_token.strip())
        if not valid:
            logger.warning("Stack API key or delivery token is empty")
        return valid

    def __repr__(self) -> str:
        return f"StackAuth(api_key={self.api_key!r}, delivery_token='***')"
