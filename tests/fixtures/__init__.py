"""
Test fixtures package for cachepounder tests.

This package provides a capturing logger, fault-injecting cache
collaborators and sample workload configurations.
"""

from tests.fixtures.mock_logger import MockLogger
from tests.fixtures.fault_adapters import (
    ClosingSpyAdapter,
    CorruptingCacheAdapter,
    CountingCacheAdapter,
    FailingCacheAdapter,
    TruncatingCacheAdapter,
)
from tests.fixtures.sample_data import (
    SAMPLE_CONFIG,
    SAMPLE_CONFIG_YAML,
    create_sample_config,
    create_sample_run_args,
)

__all__ = [
    'MockLogger',
    'ClosingSpyAdapter',
    'CorruptingCacheAdapter',
    'CountingCacheAdapter',
    'FailingCacheAdapter',
    'TruncatingCacheAdapter',
    'SAMPLE_CONFIG',
    'SAMPLE_CONFIG_YAML',
    'create_sample_config',
    'create_sample_run_args',
]
