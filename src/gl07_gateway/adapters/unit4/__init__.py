"""Unit4 adapters."""

from .client import Unit4ApiClient
from .token import TokenCache

__all__ = ["TokenCache", "Unit4ApiClient"]
