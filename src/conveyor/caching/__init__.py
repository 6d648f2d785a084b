"""
conveyor.caching - Cache-Aside Resource Layer
===============================================

    - ResourceCache:         generic TTL + capacity cache with single-flight loads
    - CacheStats:            thread-safe hit/miss/load/eviction counters
    - InventoryCache (ABC):  cached cloud inventory accessors
    - MemoryInventoryCache:  one ResourceCache per resource kind

Usage:
    from conveyor.caching import MemoryInventoryCache
"""

from conveyor.caching.inventory_cache import InventoryCache, MemoryInventoryCache
from conveyor.caching.resource_cache import CacheStats, ResourceCache

__all__ = [
    "CacheStats",
    "InventoryCache",
    "MemoryInventoryCache",
    "ResourceCache",
]
