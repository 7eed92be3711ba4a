"""
Shared pytest fixtures for cachepounder tests.

These fixtures provide loggers, sample workload configurations and cache
collaborators that can be used across all test modules.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from cachepounder.adapters import MemoryCacheAdapter
from cachepounder.config import WorkloadConfig
from tests.fixtures import MockLogger, SAMPLE_CONFIG_YAML, create_sample_config


# =============================================================================
# Logger Fixtures
# =============================================================================

@pytest.fixture
def mock_logger():
    """
    Create a mock logger that records all log calls.

    Usage:
        def test_something(mock_logger):
            some_function(logger=mock_logger)
            mock_logger.status.assert_called_with("expected message")
    """
    logger = MagicMock()
    for level in ['debug', 'info', 'warning', 'error', 'critical',
                  'status', 'verbose', 'verboser', 'result']:
        setattr(logger, level, MagicMock())
    return logger


@pytest.fixture
def capturing_logger():
    """
    Create a thread-safe logger that captures messages per level.

    Usage:
        def test_something(capturing_logger):
            some_function(logger=capturing_logger)
            capturing_logger.assert_logged('status', 'ROUND 0')
    """
    return MockLogger()


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def config_mapping():
    """Option mapping as read from a config file."""
    return create_sample_config()


@pytest.fixture
def workload_config(config_mapping):
    """Validated WorkloadConfig built from config_mapping with a fixed seed."""
    return WorkloadConfig.from_mapping({**config_mapping, 'seed': 1234})


@pytest.fixture
def config_file(tmp_path) -> Path:
    """Sample config.yml written to a temporary directory."""
    path = tmp_path / "config.yml"
    path.write_text(SAMPLE_CONFIG_YAML)
    return path


# =============================================================================
# Cache Fixtures
# =============================================================================

@pytest.fixture
def memory_cache(workload_config):
    cache = MemoryCacheAdapter(workload_config)
    yield cache
    cache.close()
