"""
Utility functions shared across the pounder.

Classes:
    PounderJsonEncoder: JSON encoder for enums, dataclasses and sets.

Functions:
    read_yaml_file: Load a YAML file.
    parse_size: Convert "512M"/"1G" style sizes to bytes.
    collect_host_info: Describe the host the run executes on.
    process_memory_rss: Resident memory of the current process.
"""

import dataclasses
import enum
import json
import os
import platform
import re
from typing import Any, Dict

import psutil
import yaml

from cachepounder.error_messages import format_error
from cachepounder.errors import ConfigurationError, ErrorCode


class PounderJsonEncoder(json.JSONEncoder):
    """Custom JSON encoder for pounder types.

    Handles serialization of types the standard encoder cannot process:
    - Sets are converted to lists
    - Enums are converted to their values
    - Dataclasses are converted to dictionaries
    - Objects with as_dict() use it
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, set):
            return sorted(obj)
        if isinstance(obj, enum.Enum):
            return obj.value
        if hasattr(obj, 'as_dict'):
            return obj.as_dict()
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        if isinstance(obj, bytes):
            return f"<{len(obj)} bytes>"
        return super().default(obj)


def read_yaml_file(path: str) -> Any:
    """Load a YAML file.

    Args:
        path: Path to the file.

    Returns:
        The parsed document (None for an empty file).

    Raises:
        ConfigurationError: If the file contains invalid YAML.
    """
    try:
        with open(path, 'r') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            format_error('CONFIG_PARSE_ERROR', path=path, error=e),
            actual=str(e),
            code=ErrorCode.CONFIG_PARSE_ERROR,
        ) from e


_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kKmMgGtT]?)[bB]?\s*$")
_SIZE_UNITS = {'': 1, 'k': 1024, 'm': 1024 ** 2, 'g': 1024 ** 3, 't': 1024 ** 4}


def parse_size(size) -> int:
    """Convert a size such as "1G", "512m" or "4096" to bytes.

    Example:
        >>> parse_size("1G")
        1073741824
    """
    if isinstance(size, int) and not isinstance(size, bool):
        if size < 0:
            raise ConfigurationError("Size must not be negative", parameter='offHeapSize', actual=size)
        return size

    match = _SIZE_PATTERN.match(str(size))
    if not match:
        raise ConfigurationError(
            f"Invalid size: {size}",
            parameter='offHeapSize',
            expected="a number with an optional K, M, G or T suffix",
            actual=size,
        )
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit.lower()])


def collect_host_info() -> Dict[str, Any]:
    """Describe the host: name, Python, CPU count and memory."""
    memory = psutil.virtual_memory()
    return {
        'hostname': platform.node(),
        'platform': platform.platform(),
        'python_version': platform.python_version(),
        'cpu_count': psutil.cpu_count(logical=True),
        'total_memory_bytes': memory.total,
        'available_memory_bytes': memory.available,
    }


def process_memory_rss() -> int:
    """Resident set size of this process in bytes."""
    return psutil.Process(os.getpid()).memory_info().rss
