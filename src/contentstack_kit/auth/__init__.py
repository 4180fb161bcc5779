"""Authentication providers."""

from .stack_auth import StackAuth

__all__ = ["StackAuth"]
