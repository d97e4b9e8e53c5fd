"""Run-scoped stores."""

from .content_cache import CacheStats, ContentCache

__all__ = ["CacheStats", "ContentCache"]
