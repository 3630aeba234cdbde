from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from typing import Protocol

DEFAULT_MAX_ENTRIES = 50


class SigningKeyCache(Protocol):
    def get_or_compute(self, key: Hashable, compute: Callable[[], bytes]) -> bytes: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class NullKeyCache:
    """Never stores anything; every lookup recomputes."""

    def get_or_compute(self, key: Hashable, compute: Callable[[], bytes]) -> bytes:
        return compute()

    def clear(self) -> None:
        return None

    def __len__(self) -> int:
        return 0


class BoundedKeyCache:
    """Thread-safe derived-key cache that empties itself once full."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError('max_entries must be >= 1')
        self.max_entries = max_entries
        self._entries: dict[Hashable, bytes] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get_or_compute(self, key: Hashable, compute: Callable[[], bytes]) -> bytes:
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1
            value = compute()
            if len(self._entries) >= self.max_entries:
                self._entries.clear()
                self.evictions += 1
            self._entries[key] = value
            return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


def build_key_cache(size: int) -> SigningKeyCache:
    return BoundedKeyCache(size) if size > 0 else NullKeyCache()
