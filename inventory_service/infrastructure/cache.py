"""
In-process read-through cache keyspaces.

A keyspace is one key -> value map (backed by a bounded cachetools.LRUCache)
with single-flight loading: concurrent misses on the same key share one
loader call. Loads run outside the keyspace lock; only bookkeeping is done
while holding it.

Invalidation wins over loads that are still running. A per-key invalidate
marks the in-flight load for that key stale, and invalidate_all marks every
in-flight load stale, so a value read before the invalidation is handed to
the callers already waiting on it but never installed in the keyspace.
"""

import threading
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

from cachetools import LRUCache

from inventory_service.core.logging_config import get_logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = get_logger(__name__)


class _Load(Generic[V]):
    """One in-flight loader call that other callers can wait on."""

    __slots__ = ("done", "value", "error", "stale")

    def __init__(self):
        self.done = threading.Event()
        self.value: Optional[V] = None
        self.error: Optional[BaseException] = None
        self.stale = False


class CacheKeyspace(Generic[K, V]):
    def __init__(self, name: str, maxsize: int = 10000):
        self.name = name
        self._entries: LRUCache = LRUCache(maxsize=maxsize)
        self._inflight: Dict[K, _Load[V]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._loads = 0
        self._load_failures = 0
        self._invalidations = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: K) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: K) -> Optional[V]:
        """Return the cached value or None, without loading."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def get_or_load(self, key: K, loader: Callable[[K], V]) -> V:
        """Return the cached value for key, calling loader(key) on a miss.

        At most one loader call per key is in flight; callers that miss
        while it runs wait for it and receive the same value or exception.
        Exceptions are never cached.
        """
        with self._lock:
            if key in self._entries:
                self._hits += 1
                return self._entries[key]
            self._misses += 1
            load = self._inflight.get(key)
            owner = load is None
            if owner:
                load = _Load()
                self._inflight[key] = load
                self._loads += 1

        if not owner:
            logger.debug(f"Cache {self.name}: waiting on in-flight load for {key!r}")
            load.done.wait()
            if load.error is not None:
                raise load.error
            return load.value

        logger.debug(f"Cache {self.name}: miss for {key!r}, loading")
        try:
            value = loader(key)
        except BaseException as e:
            with self._lock:
                self._load_failures += 1
                if self._inflight.get(key) is load:
                    del self._inflight[key]
            load.error = e
            load.done.set()
            raise

        with self._lock:
            if self._inflight.get(key) is load:
                del self._inflight[key]
            if not load.stale:
                self._entries[key] = value
        load.value = value
        load.done.set()
        return value

    def invalidate(self, key: K) -> None:
        with self._lock:
            self._invalidations += 1
            self._entries.pop(key, None)
            load = self._inflight.pop(key, None)
            if load is not None:
                load.stale = True

    def invalidate_all(self) -> None:
        with self._lock:
            self._invalidations += 1
            self._entries.clear()
            for load in self._inflight.values():
                load.stale = True
            self._inflight.clear()
        logger.debug(f"Cache {self.name}: invalidated all entries")

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "name": self.name,
                "size": len(self._entries),
                "maxsize": self._entries.maxsize,
                "hits": self._hits,
                "misses": self._misses,
                "loads": self._loads,
                "load_failures": self._load_failures,
                "invalidations": self._invalidations,
            }


class InventoryCaches:
    """The two process-wide inventory keyspaces."""

    BY_ID = "inventory-cache"
    BY_PRODUCT_ID = "inventory-product-cache"

    def __init__(self, maxsize: int = 10000):
        self.by_id: CacheKeyspace[int, Any] = CacheKeyspace(self.BY_ID, maxsize)
        self.by_product_id: CacheKeyspace[int, Any] = CacheKeyspace(self.BY_PRODUCT_ID, maxsize)

    def keyspaces(self) -> list:
        return [self.by_id, self.by_product_id]

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {ks.name: ks.stats() for ks in self.keyspaces()}
