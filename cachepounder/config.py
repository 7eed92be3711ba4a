"""
Configuration constants and the validated workload configuration.

The pounder is configured from a YAML mapping keyed with the camelCase option
names used in ``config.yml``. ``WorkloadConfig.from_mapping`` turns that
loosely typed mapping into an immutable, range-checked structure that is built
once at startup and never modified afterwards.
"""

import datetime
import enum
import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Mapping, Optional

from cachepounder.error_messages import format_error
from cachepounder.errors import ConfigurationError, ErrorCode, FileSystemError


def check_env(setting, default_value=None):
    """
    Return the value of an environment variable, converting "true"/"false"
    strings to booleans.
    """
    value = os.environ.get(setting, default_value)
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def get_datetime_string():
    return datetime.datetime.now().strftime("%Y%m%d_%H%M%S")


POUNDER_DEBUG = check_env('POUNDER_DEBUG', False)
DATETIME_STR = get_datetime_string()

DEFAULT_RESULTS_DIR = os.path.join(os.getcwd(), "pounder_results")
DEFAULT_CONFIG_FILE = "config.yml"
DEFAULT_CSV_FILENAME = "results.csv"


class STORE_TYPES(enum.Enum):
    OFFHEAP = "OFFHEAP"
    ONHEAP = "ONHEAP"
    DISK = "DISK"


class EXIT_CODE(enum.IntEnum):
    SUCCESS = 0
    FAILURE = 1
    INVALID_ARGUMENTS = 2
    DATA_CORRUPTION = 3
    FILE_NOT_FOUND = 4
    INTERRUPTED = 130


class OUTPUT_FORMATS(enum.Enum):
    table = "table"
    csv = "csv"
    json = "json"
    excel = "excel"


# Every payload starts with the bytes 0..4 and ends with 4..1
CHECKSUM_HEADER_LENGTH = 5
CHECKSUM_TRAILER_LENGTH = 4
CHECKSUM_OVERHEAD = CHECKSUM_HEADER_LENGTH + CHECKSUM_TRAILER_LENGTH
PAYLOAD_SIZE_SPREAD = 10
PAYLOAD_BYTE_LIMIT = 128

KEY_PREFIX = "K"
KEY_SUFFIX = "-"

BATCH_CSV_COLUMNS = [
    'round', 'timestamp', 'cacheSize', 'batchTimeMillis', 'isWarmup',
    'valueSize', 'readCount', 'writeCount', 'hotSetPercentage',
]

# Maps the option names used in config files to WorkloadConfig fields
CONFIG_KEYS = {
    'storeType': 'store_type',
    'threadCount': 'thread_count',
    'entryCount': 'entry_count',
    'offHeapSize': 'off_heap_size',
    'maxOnHeapCount': 'max_on_heap_count',
    'batchCount': 'batch_count',
    'maxValueSize': 'max_value_size',
    'minValueSize': 'min_value_size',
    'hotSetPercentage': 'hot_set_percentage',
    'rounds': 'rounds',
    'updatePercentage': 'update_percentage',
    'diskStorePath': 'disk_store_path',
    'monitoringEnabled': 'monitoring_enabled',
}

OPTIONAL_CONFIG_KEYS = {
    'seed': 'seed',
}

INT_FIELDS = {
    'thread_count', 'entry_count', 'max_on_heap_count', 'batch_count', 'max_value_size',
    'min_value_size', 'hot_set_percentage', 'rounds', 'update_percentage',
}


@dataclass(frozen=True)
class WorkloadConfig:
    """
    Immutable description of one pounder run.

    Attributes:
        store_type: Store tier the collaborator is configured for.
        thread_count: Worker threads per round.
        entry_count: Size of the key space and operations per round.
        off_heap_size: Off-heap budget passed to the collaborator (e.g. "1G").
        max_on_heap_count: Size of the hot key range [0, max_on_heap_count).
        batch_count: Operations between progress samples.
        max_value_size: Upper bound for the random part of a payload size.
        min_value_size: Lower bound of the payload size.
        hot_set_percentage: Chance (0-100) a read targets the hot range.
        rounds: Rounds to run, including the warmup round 0.
        update_percentage: Chance (0-100) a measured operation is a write.
        disk_store_path: Location for disk-backed collaborators.
        monitoring_enabled: Attach process resource usage to progress records.
        seed: Optional base seed for the per-worker generators.
    """
    store_type: STORE_TYPES
    thread_count: int
    entry_count: int
    off_heap_size: str
    max_on_heap_count: int
    batch_count: int
    max_value_size: int
    min_value_size: int
    hot_set_percentage: int
    rounds: int
    update_percentage: int
    disk_store_path: str
    monitoring_enabled: bool
    seed: Optional[int] = None

    def __post_init__(self):
        self.validate()

    @property
    def entries_per_thread(self) -> int:
        return self.entry_count // self.thread_count

    @property
    def operations_per_round(self) -> int:
        # The tail beyond entries_per_thread * thread_count is never generated
        return self.entries_per_thread * self.thread_count

    @property
    def off_heap_size_bytes(self) -> int:
        from cachepounder.utils import parse_size
        return parse_size(self.off_heap_size)

    def validate(self):
        """Check types and ranges, raising ConfigurationError on the first problem."""
        if not isinstance(self.store_type, STORE_TYPES):
            raise ConfigurationError(
                "Invalid store type",
                parameter='storeType',
                expected=[s.name for s in STORE_TYPES],
                actual=self.store_type,
            )

        for field_name in sorted(INT_FIELDS):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"Option '{_option_name(field_name)}' must be an integer",
                    parameter=_option_name(field_name),
                    expected="int",
                    actual=repr(value),
                )

        for field_name in ('off_heap_size', 'disk_store_path'):
            if not isinstance(getattr(self, field_name), str):
                raise ConfigurationError(
                    f"Option '{_option_name(field_name)}' must be a string",
                    parameter=_option_name(field_name),
                    expected="str",
                    actual=repr(getattr(self, field_name)),
                )

        if not isinstance(self.monitoring_enabled, bool):
            raise ConfigurationError(
                "Option 'monitoringEnabled' must be a boolean",
                parameter='monitoringEnabled',
                expected="true or false",
                actual=repr(self.monitoring_enabled),
            )

        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError("Option 'seed' must be an integer or null", parameter='seed',
                                     expected="int", actual=repr(self.seed))

        for field_name in ('thread_count', 'entry_count', 'batch_count', 'rounds'):
            if getattr(self, field_name) <= 0:
                raise ConfigurationError(
                    f"Option '{_option_name(field_name)}' must be greater than zero",
                    parameter=_option_name(field_name),
                    expected="> 0",
                    actual=getattr(self, field_name),
                )

        if self.max_on_heap_count < 0:
            raise ConfigurationError("Option 'maxOnHeapCount' must not be negative",
                                     parameter='maxOnHeapCount', expected=">= 0",
                                     actual=self.max_on_heap_count)

        for field_name in ('hot_set_percentage', 'update_percentage'):
            value = getattr(self, field_name)
            if not 0 <= value <= 100:
                raise ConfigurationError(
                    f"Option '{_option_name(field_name)}' is a percentage",
                    parameter=_option_name(field_name),
                    expected="0-100",
                    actual=value,
                )

        if self.min_value_size < CHECKSUM_OVERHEAD:
            raise ConfigurationError(
                "Values must be large enough to hold the checksum header and trailer",
                parameter='minValueSize',
                expected=f">= {CHECKSUM_OVERHEAD}",
                actual=self.min_value_size,
            )

        if self.max_value_size < self.min_value_size:
            raise ConfigurationError(
                "maxValueSize must not be smaller than minValueSize",
                parameter='maxValueSize',
                expected=f">= {self.min_value_size}",
                actual=self.max_value_size,
                code=ErrorCode.CONFIG_INCOMPATIBLE,
            )

        if self.thread_count > self.entry_count:
            raise ConfigurationError(
                "Every worker needs at least one key",
                parameter='threadCount',
                expected=f"<= entryCount ({self.entry_count})",
                actual=self.thread_count,
                code=ErrorCode.CONFIG_INCOMPATIBLE,
            )

        # Raises ConfigurationError for malformed sizes
        _ = self.off_heap_size_bytes

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], logger=None) -> 'WorkloadConfig':
        """
        Build a WorkloadConfig from a mapping keyed by config file option names.

        Args:
            mapping: Parsed config file contents.
            logger: Optional logger used to warn about unknown options.

        Returns:
            A validated WorkloadConfig.

        Raises:
            ConfigurationError: If options are missing, mistyped or out of range.
        """
        if not isinstance(mapping, Mapping):
            raise ConfigurationError(
                "Configuration must be a mapping of option names to values",
                expected="mapping",
                actual=type(mapping).__name__,
                code=ErrorCode.CONFIG_PARSE_ERROR,
            )

        missing = [key for key in CONFIG_KEYS if key not in mapping]
        if missing:
            raise ConfigurationError(
                f"Missing required option(s): {', '.join(missing)}",
                parameter=", ".join(missing),
                code=ErrorCode.CONFIG_MISSING_REQUIRED,
            )

        known = set(CONFIG_KEYS) | set(OPTIONAL_CONFIG_KEYS)
        unknown = sorted(str(key) for key in mapping if key not in known)
        if unknown and logger is not None:
            logger.warning(f"Ignoring unknown configuration option(s): {', '.join(unknown)}")

        kwargs = {field_name: mapping[key] for key, field_name in CONFIG_KEYS.items()}
        for key, field_name in OPTIONAL_CONFIG_KEYS.items():
            kwargs[field_name] = mapping.get(key)

        kwargs['store_type'] = _parse_store_type(kwargs['store_type'])
        return cls(**kwargs)

    def as_dict(self) -> Dict[str, Any]:
        """Return the configuration keyed by config file option names."""
        values = asdict(self)
        values['store_type'] = self.store_type.name
        option_names = {**CONFIG_KEYS, **OPTIONAL_CONFIG_KEYS}
        return {key: values[field_name] for key, field_name in option_names.items()}

    def describe(self) -> List[str]:
        return [f"{key}: {value}" for key, value in self.as_dict().items()]


def _option_name(field_name: str) -> str:
    for key, value in {**CONFIG_KEYS, **OPTIONAL_CONFIG_KEYS}.items():
        if value == field_name:
            return key
    return field_name


def _parse_store_type(value) -> STORE_TYPES:
    if isinstance(value, STORE_TYPES):
        return value
    try:
        return STORE_TYPES[str(value).upper()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown store type: {value}",
            parameter='storeType',
            expected=[s.name for s in STORE_TYPES],
            actual=value,
        ) from None


def load_workload_config(path: str, overrides: Optional[Dict[str, Any]] = None,
                         logger=None) -> WorkloadConfig:
    """
    Load and validate a YAML workload configuration file.

    Args:
        path: Path to the YAML file.
        overrides: Option values that replace those read from the file.
        logger: Optional logger for warnings.

    Returns:
        The validated WorkloadConfig.

    Raises:
        FileSystemError: If the file does not exist.
        ConfigurationError: If the file cannot be parsed or is invalid.
    """
    from cachepounder.utils import read_yaml_file

    if not os.path.isfile(path):
        raise FileSystemError(
            format_error('CONFIG_FILE_NOT_FOUND', path=path),
            path=path,
            operation="read",
            suggestion="Pass an existing file with --config-file",
        )

    mapping = read_yaml_file(path)
    if mapping is None:
        mapping = {}
    if overrides:
        if not isinstance(mapping, dict):
            mapping = {}
        mapping = {**mapping, **overrides}

    return WorkloadConfig.from_mapping(mapping, logger=logger)
