"""
Interface definitions for the pounder.

The cache under test is an external collaborator. Anything that implements
CacheAdapter can be driven by the pounder, which keeps the workload logic
independent of a particular cache engine and lets tests substitute
fault-injecting collaborators.

Example Usage:
    from cachepounder.interfaces import CacheAdapter

    class MyCache(CacheAdapter):
        def put(self, key, value): ...
        def get(self, key): ...
        def size(self): ...
"""

from cachepounder.interfaces.cache_adapter import CacheAdapter

__all__ = [
    'CacheAdapter',
]
