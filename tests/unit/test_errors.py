"""
Tests for cachepounder.errors and cachepounder.error_messages.
"""

import pytest

from cachepounder.error_messages import ERROR_MESSAGES, ErrorFormatter, format_error
from cachepounder.errors import (
    CacheAdapterError,
    CachePounderException,
    ConfigurationError,
    DataCorruptionError,
    ErrorCode,
    FileSystemError,
    WorkerFaultError,
)


class TestExceptions:

    def test_all_errors_share_base_class(self):
        for exc in (ConfigurationError("x"), DataCorruptionError("x"), WorkerFaultError("x"),
                    CacheAdapterError("x"), FileSystemError("x")):
            assert isinstance(exc, CachePounderException)

    def test_string_contains_code_and_suggestion(self):
        exc = ConfigurationError("Bad value", parameter='rounds', expected="> 0", actual=0)
        text = str(exc)
        assert "[E102] Bad value" in text
        assert "Parameter: rounds" in text
        assert "Suggestion:" in text

    def test_configuration_error_default_suggestion_follows_code(self):
        exc = ConfigurationError("Missing", code=ErrorCode.CONFIG_MISSING_REQUIRED)
        assert "--param" in exc.suggestion

    def test_data_corruption_error_attributes(self):
        exc = DataCorruptionError("mismatch", position=2, expected=2, actual=99, length=50, key="K7-")

        assert exc.code == ErrorCode.DATA_CORRUPTION
        assert exc.position == 2
        assert exc.expected == 2
        assert exc.actual == 99
        assert exc.length == 50
        assert exc.key == "K7-"
        assert "Key: K7-" in str(exc)

    def test_worker_fault_error_keeps_cause(self):
        cause = RuntimeError("boom")
        exc = WorkerFaultError("worker died", worker=3, round_index=1, cause=cause)

        assert exc.code == ErrorCode.WORKER_FAULT
        assert exc.cause is cause
        assert exc.worker == 3
        assert "RuntimeError: boom" in str(exc)

    def test_file_system_error_permission_suggestion(self):
        exc = FileSystemError("denied", path="/x", code=ErrorCode.FS_PERMISSION_DENIED)
        assert "permissions" in exc.suggestion


class TestFormatError:

    def test_formats_known_template(self):
        msg = format_error('CHECKSUM_TRAILER_MISMATCH', position=49, expected=1, actual=0)
        assert msg == "Checksum trailer mismatch at byte 49: expected 1, got 0"

    def test_unknown_key(self):
        assert format_error('NOT_A_KEY', a=1).startswith("Unknown error: NOT_A_KEY")

    def test_missing_parameter(self):
        assert "Missing format parameter" in format_error('WORKER_FAILED', worker=1)

    def test_every_template_is_a_string(self):
        assert all(isinstance(template, str) for template in ERROR_MESSAGES.values())


class TestErrorFormatter:

    def test_plain_output(self):
        formatter = ErrorFormatter(use_colors=False)
        exc = DataCorruptionError("mismatch", position=1, expected=1, actual=5)

        text = formatter.format_exception(exc)

        assert text.startswith("[E201] mismatch")
        assert "position: 1" in text
        assert "key:" not in text
        assert "Suggestion:" in text
        assert "\033[" not in text

    def test_colored_header(self):
        formatter = ErrorFormatter(use_colors=True)
        assert formatter.format_error_header("E101", "x").startswith("\033[91m")

    @pytest.mark.parametrize("details,expected", [
        ({'worker': 2}, "  worker: 2"),
        ({'round_index': 0}, "  round_index: 0"),
    ])
    def test_format_details(self, details, expected):
        assert ErrorFormatter(use_colors=False).format_details(details) == expected
