"""In-Memory Cache - bounded LRU CacheBackend for subtree lookups.

Invariants:
    - At most max_entries keys; the least recently used key is evicted first
    - Values are deep-copied on set and on get: callers never share cached objects
    - get/set never raise for a well-formed key
"""

import copy
from collections import OrderedDict
from typing import Any


class InMemoryCache:
    """Process-local LRU cache implementing the CacheBackend protocol."""

    def __init__(self, max_entries: int = 10_000):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self.hits = 0
        self.misses = 0

    async def get(self, key: str) -> Any | None:
        if key not in self._entries:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return copy.deepcopy(self._entries[key])

    async def set(self, key: str, value: Any) -> None:
        self._entries[key] = copy.deepcopy(value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        """Drop every entry (called after structural mutations)."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
