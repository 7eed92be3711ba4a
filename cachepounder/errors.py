"""
Exceptions raised by the cache pounder.

Every exception carries an ``ErrorCode``, a one-line message, the context it
was raised with and a suggestion for the user. ``str(exc)`` renders all of
them so a bare traceback is still readable.

Two failures end a run immediately: a value that fails its checksum when read
back (DataCorruptionError) and a worker thread that dies with any other
exception (WorkerFaultError). Neither is retried.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(Enum):
    # Configuration (1xx)
    CONFIG_MISSING_REQUIRED = "E101"
    CONFIG_INVALID_VALUE = "E102"
    CONFIG_FILE_NOT_FOUND = "E103"
    CONFIG_PARSE_ERROR = "E104"
    CONFIG_INCOMPATIBLE = "E105"

    # Rounds (2xx)
    DATA_CORRUPTION = "E201"
    WORKER_FAULT = "E202"
    RUN_INTERRUPTED = "E203"

    # Cache collaborator (3xx)
    ADAPTER_LOAD_FAILED = "E301"
    ADAPTER_INIT_FAILED = "E302"

    # Results directory and config files (4xx)
    FS_PATH_NOT_FOUND = "E401"
    FS_PERMISSION_DENIED = "E402"

    INTERNAL_ERROR = "E901"


@dataclass
class PounderError:
    code: ErrorCode
    message: str
    details: str = ""
    suggestion: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"[{self.code.value}] {self.message}"]
        if self.details:
            lines.append(f"  Details: {self.details}")
        if self.suggestion:
            lines.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(lines)


class CachePounderException(Exception):
    """Base class for pounder errors.

    Subclasses list the context keys worth showing in ``DETAIL_LABELS``; keys
    whose value is None are left out of the details line.
    """

    DEFAULT_CODE = ErrorCode.INTERNAL_ERROR
    DETAIL_LABELS: Dict[str, str] = {}
    SUGGESTIONS: Dict[ErrorCode, str] = {}
    FALLBACK_SUGGESTION = ""

    def __init__(self, message: str, code: Optional[ErrorCode] = None,
                 suggestion: Optional[str] = None, **context):
        code = code or self.DEFAULT_CODE
        self.error = PounderError(
            code=code,
            message=message,
            details=self._render_details(context),
            suggestion=suggestion or self.SUGGESTIONS.get(code, self.FALLBACK_SUGGESTION),
            context=context,
        )
        super().__init__(str(self.error))

    @classmethod
    def _render_details(cls, context: Dict[str, Any]) -> str:
        return "; ".join(f"{label}: {context[key]}" for key, label in cls.DETAIL_LABELS.items()
                         if context.get(key) is not None)

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def suggestion(self) -> str:
        return self.error.suggestion


class ConfigurationError(CachePounderException):
    """An option is missing, mistyped, out of range or inconsistent with another."""

    DEFAULT_CODE = ErrorCode.CONFIG_INVALID_VALUE
    DETAIL_LABELS = {'parameter': "Parameter", 'expected': "Expected", 'actual': "Actual"}
    SUGGESTIONS = {
        ErrorCode.CONFIG_MISSING_REQUIRED: "Add the option to the config file or pass it with --param",
        ErrorCode.CONFIG_INVALID_VALUE: "Check the option value and correct it",
        ErrorCode.CONFIG_FILE_NOT_FOUND: "Verify the config file path exists",
        ErrorCode.CONFIG_PARSE_ERROR: "Check config file syntax (YAML format)",
        ErrorCode.CONFIG_INCOMPATIBLE: "Review how the options relate to each other",
    }
    FALLBACK_SUGGESTION = "Check the configuration and try again"

    def __init__(self, message: str, parameter: str = None, expected: Any = None, actual: Any = None,
                 suggestion: str = None, code: ErrorCode = None):
        super().__init__(message, code=code, suggestion=suggestion,
                         parameter=parameter, expected=expected, actual=actual)
        self.parameter = parameter


class DataCorruptionError(CachePounderException):
    """A value read back from the cache failed checksum validation.

    This always means the collaborator under test returned wrong or truncated
    bytes. The run stops.
    """

    DEFAULT_CODE = ErrorCode.DATA_CORRUPTION
    DETAIL_LABELS = {
        'key': "Key",
        'position': "Position",
        'expected': "Expected byte",
        'actual': "Actual byte",
        'length': "Value length",
    }
    FALLBACK_SUGGESTION = "The cache returned bytes that differ from what was stored; inspect the cache implementation"

    def __init__(self, message: str, position: int = None, expected: int = None,
                 actual: int = None, length: int = None, key: str = None):
        super().__init__(message, position=position, expected=expected, actual=actual,
                         length=length, key=key)
        self.position = position
        self.expected = expected
        self.actual = actual
        self.length = length
        self.key = key


class WorkerFaultError(CachePounderException):
    """A worker thread raised something other than DataCorruptionError."""

    DEFAULT_CODE = ErrorCode.WORKER_FAULT
    DETAIL_LABELS = {'worker': "Worker", 'round_index': "Round", 'cause': "Cause"}
    FALLBACK_SUGGESTION = "Run with --debug for the full stack trace"

    def __init__(self, message: str, worker: int = None, round_index: int = None,
                 cause: BaseException = None):
        super().__init__(message, worker=worker, round_index=round_index,
                         cause=f"{type(cause).__name__}: {cause}" if cause is not None else None)
        self.worker = worker
        self.round_index = round_index
        self.cause = cause


class CacheAdapterError(CachePounderException):
    """The cache collaborator could not be imported or constructed."""

    DEFAULT_CODE = ErrorCode.ADAPTER_LOAD_FAILED
    DETAIL_LABELS = {'adapter': "Adapter"}
    FALLBACK_SUGGESTION = "Use the form 'package.module:ClassName' for --adapter"

    def __init__(self, message: str, adapter: str = None, suggestion: str = None, code: ErrorCode = None):
        super().__init__(message, code=code, suggestion=suggestion, adapter=adapter)


class FileSystemError(CachePounderException):
    """A config file is missing or the results directory cannot be written."""

    DEFAULT_CODE = ErrorCode.FS_PATH_NOT_FOUND
    DETAIL_LABELS = {'path': "Path", 'operation': "Operation"}
    SUGGESTIONS = {
        ErrorCode.FS_PATH_NOT_FOUND: "Verify the path exists and is accessible",
        ErrorCode.FS_PERMISSION_DENIED: "Check file/directory permissions",
    }
    FALLBACK_SUGGESTION = "Check file system and try again"

    def __init__(self, message: str, path: str = None, operation: str = None,
                 suggestion: str = None, code: ErrorCode = None):
        super().__init__(message, code=code, suggestion=suggestion, path=path, operation=operation)
