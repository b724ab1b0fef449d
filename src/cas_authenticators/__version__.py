"""Version information for cas-authenticators."""

__version__ = "1.0.0"
