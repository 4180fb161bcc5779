"""Stack clients."""

from .async_client import AsyncStack
from .base import BaseStack, PreparedRequest
from .sync_client import Stack

__all__ = ["AsyncStack", "BaseStack", "PreparedRequest", "Stack"]
