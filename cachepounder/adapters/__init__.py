"""
Reference cache collaborators and the factory that selects one.

``create_cache_adapter`` builds the collaborator for a run: either an external
class named with ``--adapter package.module:ClassName`` (constructed with the
WorkloadConfig) or the reference implementation matching the configured store
type.
"""

import importlib
from typing import Optional, Type

from cachepounder.adapters.disk import DiskCacheAdapter
from cachepounder.adapters.memory import MemoryCacheAdapter
from cachepounder.config import STORE_TYPES
from cachepounder.errors import CacheAdapterError, ErrorCode
from cachepounder.interfaces import CacheAdapter

STORE_TYPE_ADAPTERS = {
    STORE_TYPES.ONHEAP: MemoryCacheAdapter,
    STORE_TYPES.OFFHEAP: MemoryCacheAdapter,
    STORE_TYPES.DISK: DiskCacheAdapter,
}


def load_adapter_class(spec: str) -> Type[CacheAdapter]:
    """Import a CacheAdapter subclass from a "package.module:ClassName" string."""
    module_name, sep, class_name = spec.partition(':')
    if not sep or not module_name or not class_name:
        raise CacheAdapterError(f"Invalid adapter specification: {spec}", adapter=spec)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise CacheAdapterError(f"Could not import adapter module '{module_name}': {e}", adapter=spec) from e

    adapter_class = getattr(module, class_name, None)
    if adapter_class is None:
        raise CacheAdapterError(f"Module '{module_name}' has no attribute '{class_name}'", adapter=spec)
    if not (isinstance(adapter_class, type) and issubclass(adapter_class, CacheAdapter)):
        raise CacheAdapterError(
            f"'{spec}' is not a CacheAdapter subclass",
            adapter=spec,
            suggestion="Derive the class from cachepounder.interfaces.CacheAdapter",
        )
    return adapter_class


def create_cache_adapter(config, adapter_spec: Optional[str] = None, logger=None) -> CacheAdapter:
    """
    Build the cache collaborator for a run.

    Args:
        config: The WorkloadConfig of the run.
        adapter_spec: Optional "package.module:ClassName" of an external adapter.
        logger: Optional logger that receives the active cache configuration.

    Returns:
        An initialized CacheAdapter.
    """
    if adapter_spec:
        adapter_class = load_adapter_class(adapter_spec)
    else:
        adapter_class = STORE_TYPE_ADAPTERS[config.store_type]

    try:
        adapter = adapter_class(config)
    except CacheAdapterError:
        raise
    except Exception as e:
        raise CacheAdapterError(
            f"Failed to initialize {adapter_class.__name__}: {e}",
            adapter=adapter_spec or adapter_class.__name__,
            suggestion="Check the store settings in the configuration",
            code=ErrorCode.ADAPTER_INIT_FAILED,
        ) from e

    if logger is not None:
        logger.status("Cache configuration:")
        for key, value in adapter.describe().items():
            logger.status(f"  {key}: {value}")
    return adapter


__all__ = [
    'MemoryCacheAdapter',
    'DiskCacheAdapter',
    'STORE_TYPE_ADAPTERS',
    'load_adapter_class',
    'create_cache_adapter',
]
