"""
conveyor.caching.resource_cache - Cache-Aside Primitive
=========================================================

A bounded, time-expiring, thread-safe cache that loads missing values on
demand. One instance is created per inventory resource kind.

How a lookup works:

    get(key, loader)
        │
        ├─ live entry?  ──────────────→ return it (no loader call)
        │
        ├─ load already in flight for key?
        │     └─ wait for it ─────────→ return its result / raise its error
        │
        └─ become the leader
              ├─ run loader()   (on its own thread when a timeout is set)
              ├─ value is not None → store it
              ├─ value is None     → store nothing (no negative caching)
              └─ wake every waiter

Guarantees:
    - At most one loader call per key at a time. Concurrent callers for the
      same key coalesce onto the in-flight load and all receive its result.
      A load stays in flight until its loader returns, even after callers
      gave up waiting on it.
    - Loads for different keys run in parallel: the cache lock is never held
      while a loader runs.
    - Entries expire ``ttl_seconds`` after they were written. When the cache
      is full, expired entries are purged first, then the least recently
      used entry is evicted.
    - Loader exceptions reach the leader and every waiter unchanged, and are
      not cached.

Loader timeout:
    With ``loader_timeout_seconds`` set, each load runs on a dedicated daemon
    thread and every caller waits at most that long for it. A caller that
    gives up raises ResourceLoadTimeout; the load keeps running, later
    callers for the key join it, and its value is stored when it arrives.
    A hung load never delays loads of other keys.

Usage:
    >>> cache = ResourceCache("subnet", max_entries=1000, ttl_seconds=30)
    >>> subnet = cache.get_or_not_found(
    ...     "subnet-1",
    ...     "Subnet with id subnet-1 not found",
    ...     lambda: client_lookup("subnet-1"),
    ... )
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

import structlog

from conveyor.core.exceptions import ResourceLoadTimeout, ResourceNotFound


logger = structlog.get_logger()

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


# =============================================================================
# Cache Statistics
# =============================================================================
@dataclass
class CacheStats:
    """Thread-safe counters describing how a cache is behaving.

    Attributes:
        hits: Lookups answered from a live entry.
        misses: Lookups that found no live entry (leaders and waiters).
        loads: Loader invocations.
        load_failures: Loader invocations that raised.
        timeouts: Lookups that gave up waiting on a load.
        evictions: Entries removed to respect the capacity bound.
        expirations: Entries removed because their TTL elapsed.
    """

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    hits: int = 0
    misses: int = 0
    loads: int = 0
    load_failures: int = 0
    timeouts: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def add(self, counter: str, count: int = 1) -> None:
        with self._lock:
            setattr(self, counter, getattr(self, counter) + count)

    def to_dict(self) -> dict[str, float | int]:
        with self._lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": round(self.hit_rate, 4),
                "loads": self.loads,
                "load_failures": self.load_failures,
                "timeouts": self.timeouts,
                "evictions": self.evictions,
                "expirations": self.expirations,
            }

    def reset(self) -> None:
        with self._lock:
            self.hits = 0
            self.misses = 0
            self.loads = 0
            self.load_failures = 0
            self.timeouts = 0
            self.evictions = 0
            self.expirations = 0


# =============================================================================
# Internal Records
# =============================================================================
@dataclass
class _Entry(Generic[V]):
    value: V
    written_at: float


class _InFlightLoad(Generic[V]):
    """Rendezvous between the leader running a load and its waiters."""

    __slots__ = ("done", "value", "error")

    def __init__(self) -> None:
        self.done = threading.Event()
        self.value: Optional[V] = None
        self.error: Optional[BaseException] = None


# =============================================================================
# ResourceCache
# =============================================================================
class ResourceCache(Generic[K, V]):
    """Generic TTL + capacity cache with single-flight loading.

    Args:
        name: Cache name, used in logs, statistics and error details.
        max_entries: Capacity bound.
        ttl_seconds: Time-to-live of an entry, measured from write.
        loader_timeout_seconds: If set, each load runs on its own thread and a
            lookup stops waiting for it after this many seconds.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        name: str,
        max_entries: int,
        ttl_seconds: float,
        loader_timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")

        self._name = name
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._loader_timeout_seconds = loader_timeout_seconds
        self._clock = clock

        # Guarded by _lock
        self._entries: OrderedDict[K, _Entry[V]] = OrderedDict()
        self._in_flight: dict[K, _InFlightLoad[V]] = {}
        self._lock = threading.Lock()
        self._closed = False

        self._stats = CacheStats()
        self._logger = logger.bind(component="resource_cache", cache=name)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def size(self) -> int:
        """Number of stored entries, including ones that expired but were not purged yet."""
        with self._lock:
            return len(self._entries)

    # =========================================================================
    # Lookups
    # =========================================================================

    def get(self, key: K, loader: Callable[[], Optional[V]]) -> Optional[V]:
        """Return the cached value for ``key``, loading it on a miss.

        Args:
            key: Cache key.
            loader: Blocking zero-argument callable producing the value, or
                None when no such resource exists.

        Returns:
            The value, or None if the loader found nothing. None is never
            stored, so the next call loads again.

        Raises:
            ResourceLoadTimeout: If the load exceeded the loader timeout.
            Exception: Whatever the loader raised, unchanged.
        """
        with self._lock:
            entry = self._live_entry(key)
            if entry is not None:
                self._stats.add("hits")
                return entry.value

            self._stats.add("misses")
            flight = self._in_flight.get(key)
            leader = flight is None
            if flight is None:
                flight = _InFlightLoad()
                self._in_flight[key] = flight

        if leader:
            if self._loader_timeout_seconds is None:
                self._load(key, loader, flight)
            else:
                threading.Thread(
                    target=self._load,
                    args=(key, loader, flight),
                    name=f"cache-{self._name}-load",
                    daemon=True,
                ).start()
        else:
            self._logger.debug("resource_cache_join_in_flight", key=key)

        return self._await(key, flight)

    def get_or_not_found(
        self,
        key: K,
        not_found_message: str,
        loader: Callable[[], Optional[V]],
    ) -> V:
        """Like get(), but a missing resource raises ResourceNotFound.

        Raises:
            ResourceNotFound: If the loader found nothing. Carries
                ``not_found_message``.
        """
        value = self.get(key, loader)
        if value is None:
            self._logger.info("resource_not_found", key=key)
            raise ResourceNotFound(
                message=not_found_message,
                details={"cache": self._name, "key": str(key)},
            )
        return value

    # =========================================================================
    # Administration
    # =========================================================================

    def invalidate(self, key: K) -> bool:
        """Drop one entry. Returns True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()
        self._logger.debug("resource_cache_invalidated")

    def close(self) -> None:
        """Drop every entry and stop storing. Lookups keep loading uncached."""
        with self._lock:
            self._closed = True
            self._entries.clear()
        self._logger.debug("resource_cache_closed")

    # =========================================================================
    # Internals
    # =========================================================================

    def _load(
        self, key: K, loader: Callable[[], Optional[V]], flight: _InFlightLoad[V]
    ) -> None:
        """Run the loader and settle ``flight``. Never raises."""
        self._stats.add("loads")
        self._logger.debug("resource_cache_load", key=key)
        try:
            flight.value = loader()
        except BaseException as exc:
            flight.error = exc
            self._stats.add("load_failures")
        finally:
            with self._lock:
                if flight.value is not None and not self._closed:
                    self._put(key, flight.value)
                self._in_flight.pop(key, None)
            flight.done.set()

    def _await(self, key: K, flight: _InFlightLoad[V]) -> Optional[V]:
        """Wait for ``flight`` within the loader timeout and hand back its outcome."""
        if not flight.done.wait(self._loader_timeout_seconds):
            self._stats.add("timeouts")
            self._logger.warning(
                "resource_load_timeout",
                key=key,
                timeout_seconds=self._loader_timeout_seconds,
            )
            raise ResourceLoadTimeout(
                key=str(key), timeout_seconds=self._loader_timeout_seconds
            )
        if flight.error is not None:
            raise flight.error
        return flight.value

    def _live_entry(self, key: K) -> Optional[_Entry[V]]:
        """Return the entry if present and not expired (lock held)."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry):
            del self._entries[key]
            self._stats.add("expirations")
            return None
        self._entries.move_to_end(key)
        return entry

    def _is_expired(self, entry: _Entry[V]) -> bool:
        return self._clock() - entry.written_at >= self._ttl_seconds

    def _put(self, key: K, value: V) -> None:
        """Store a value, evicting to respect the capacity bound (lock held)."""
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self._max_entries:
            self._purge_expired()
            while len(self._entries) >= self._max_entries:
                self._entries.popitem(last=False)
                self._stats.add("evictions")
        self._entries[key] = _Entry(value=value, written_at=self._clock())

    def _purge_expired(self) -> None:
        expired = [k for k, entry in self._entries.items() if self._is_expired(entry)]
        for k in expired:
            del self._entries[k]
        if expired:
            self._stats.add("expirations", len(expired))
