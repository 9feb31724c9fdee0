"""
Installation caching for nucel-setup.
"""

from nucel_setup.cache.adapter import CacheAdapter, teardown_staging
from nucel_setup.cache.store import CacheTransport, LocalCacheStore

__all__ = ["CacheAdapter", "CacheTransport", "LocalCacheStore", "teardown_staging"]
