"""
In-process reference cache.

Serves the ONHEAP and OFFHEAP store types when no external cache engine is
plugged in. It keeps every entry (no eviction, no tiering) so a correct run
against it must never report corruption.
"""

import threading
from typing import Any, Dict, Optional

from cachepounder.interfaces import CacheAdapter


class MemoryCacheAdapter(CacheAdapter):
    """Thread-safe dictionary holding values in process memory."""

    def __init__(self, config=None):
        self.config = config
        self._entries: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: bytes) -> None:
        # Copies bytearray and memoryview inputs; bytes pass through unchanged
        with self._lock:
            self._entries[key] = bytes(value)

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._entries.get(key)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def close(self) -> None:
        with self._lock:
            self._entries.clear()

    def describe(self) -> Dict[str, Any]:
        description = super().describe()
        if self.config is not None:
            description.update({
                'storeType': self.config.store_type.name,
                'maxOnHeapCount': self.config.max_on_heap_count,
                'offHeapSize': self.config.off_heap_size,
            })
        return description
