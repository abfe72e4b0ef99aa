"""Per-user currency cache.

Pure memoization of near-static reference data: entries are written only by
successful resolutions and removed by explicit clears or by the configured
eviction policy.

Policies:
    - none: entries live for the process lifetime
    - ttl:  entries older than ``ttl_seconds`` are dropped when read
    - lru:  at most ``max_entries`` entries; least recently used evicted on insert

Concurrent resolutions for the same key may race; last write wins.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import time
from typing import Callable, Generic, Optional, TypeVar

from app.core.config import Settings

V = TypeVar("V")


@dataclass
class _CacheEntry(Generic[V]):
    value: V
    stored_at: float


class CurrencyCache(Generic[V]):
    def __init__(
        self,
        policy: str = "none",
        ttl_seconds: float = 3600,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        if policy not in ("none", "ttl", "lru"):
            raise ValueError(f"unknown cache policy '{policy}'")
        if policy == "ttl" and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if policy == "lru" and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.policy = policy
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, _CacheEntry[V]]" = OrderedDict()

    def _is_expired(self, entry: _CacheEntry[V]) -> bool:
        return self.policy == "ttl" and self._clock() - entry.stored_at >= self._ttl

    def get(self, key: str) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry):
            self._entries.pop(key, None)
            return None
        if self.policy == "lru":
            self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: V) -> None:
        self._entries[key] = _CacheEntry(value=value, stored_at=self._clock())
        self._entries.move_to_end(key)
        if self.policy == "lru":
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self, key: Optional[str] = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


def build_currency_cache(settings: Settings) -> CurrencyCache:
    return CurrencyCache(
        policy=settings.currency_cache_policy,
        ttl_seconds=settings.currency_cache_ttl_seconds,
        max_entries=settings.currency_cache_max_entries,
    )
