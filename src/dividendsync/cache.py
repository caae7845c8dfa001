"""Cache backends for resolved dividend facts - Memory (TTL/LRU) and no-op.

Caches live for the process lifetime; nothing is persisted across restarts.
Negative results (non-payers) are cached exactly like positive ones.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections import OrderedDict

from dividendsync.models.dividend import DividendFact


class FactCache(ABC):
    """Abstract symbol -> DividendFact cache interface."""

    @abstractmethod
    def get(self, symbol: str) -> DividendFact | None:
        """Return the cached fact, or None on miss."""
        ...

    @abstractmethod
    def store(self, symbol: str, fact: DividendFact) -> None:
        ...

    @abstractmethod
    def has(self, symbol: str) -> bool:
        ...

    @abstractmethod
    def clear(self, symbol: str) -> None:
        ...

    @abstractmethod
    def clear_all(self) -> None:
        ...


class NoFactCache(FactCache):
    """No-op cache - always misses."""

    def get(self, symbol):  # type: ignore[override]
        return None

    def store(self, symbol, fact):  # type: ignore[override]
        pass

    def has(self, symbol):  # type: ignore[override]
        return False

    def clear(self, symbol):  # type: ignore[override]
        pass

    def clear_all(self):
        pass

    def __len__(self) -> int:
        return 0


class MemoryFactCache(FactCache):
    """In-memory fact cache with optional TTL and LRU eviction.

    ``ttl_seconds=None`` keeps entries until evicted by ``max_entries`` or
    cleared explicitly.
    """

    def __init__(self, ttl_seconds: float | None = None, max_entries: int = 10_000) -> None:
        self.ttl = ttl_seconds
        self.max_entries = max_entries
        self._store: OrderedDict[str, tuple[float, DividendFact]] = OrderedDict()

    @staticmethod
    def _key(symbol: str) -> str:
        return symbol.upper()

    def _expired(self, ts: float) -> bool:
        return self.ttl is not None and time.monotonic() - ts > self.ttl

    def _evict_lru(self) -> None:
        while len(self._store) > self.max_entries:
            self._store.popitem(last=False)

    def get(self, symbol: str) -> DividendFact | None:
        key = self._key(symbol)
        entry = self._store.get(key)
        if entry is None:
            return None
        ts, fact = entry
        if self._expired(ts):
            del self._store[key]
            return None
        self._store.move_to_end(key)  # refresh LRU position
        return fact

    def store(self, symbol: str, fact: DividendFact) -> None:
        key = self._key(symbol)
        self._store[key] = (time.monotonic(), fact)
        self._store.move_to_end(key)
        self._evict_lru()

    def has(self, symbol: str) -> bool:
        return self.get(symbol) is not None

    def clear(self, symbol: str) -> None:
        self._store.pop(self._key(symbol), None)

    def clear_all(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


def create_fact_cache(
    backend: str,
    ttl_seconds: float | None = None,
    max_entries: int = 10_000,
) -> FactCache:
    if backend == "memory":
        return MemoryFactCache(ttl_seconds=ttl_seconds, max_entries=max_entries)
    return NoFactCache()
