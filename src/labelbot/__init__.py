"""Carrier portal session pool and label generation workers."""

__version__ = "0.1.0"

__all__ = ["__version__"]
