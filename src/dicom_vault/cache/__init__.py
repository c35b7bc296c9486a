"""Response cache."""

from .client import ResponseCache, CacheConfig

__all__ = ["ResponseCache", "CacheConfig"]
