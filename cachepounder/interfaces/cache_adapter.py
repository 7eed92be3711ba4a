"""
Cache collaborator interface.

The pounder drives a cache through three operations only. Implementations
must tolerate concurrent put/get/size calls from every worker thread; the
pounder itself does no locking around them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class CacheAdapter(ABC):
    """Abstract interface for the cache under test.

    A read of a key that is not present returns None. That is a legitimate
    outcome under eviction or overflow policies and is not an error.

    Example:
        class DictCache(CacheAdapter):
            def __init__(self):
                self._data = {}

            def put(self, key, value):
                self._data[key] = value

            def get(self, key):
                return self._data.get(key)

            def size(self):
                return len(self._data)
    """

    @abstractmethod
    def put(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the bytes stored under ``key`` or None when absent."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Return the number of entries currently held."""
        pass

    def close(self) -> None:
        """Release resources held by the cache. Called once after the last round."""
        pass

    def describe(self) -> Dict[str, Any]:
        """Return a description of the active cache configuration for logging."""
        return {'adapter': type(self).__name__}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
