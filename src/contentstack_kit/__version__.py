"""Version information for contentstack-kit."""

__version__ = "0.1.0"
