"""Blob cache bindings — restore and save installed directory trees."""

from src.adapters.cache.store import CacheStore, LocalCacheStore, default_cache_root

__all__ = [
    "CacheStore",
    "LocalCacheStore",
    "default_cache_root",
]
