"""
Message templates for pounder failures and a formatter for the console.

Templates are keyed by name and filled with ``format_error``:

    format_error('CHECKSUM_HEADER_MISMATCH', position=2, expected=2, actual=7)
"""

from typing import Any, Dict


ERROR_MESSAGES: Dict[str, str] = {
    # Validation of values read back from the cache
    'CHECKSUM_HEADER_MISMATCH': "Checksum header mismatch at byte {position}: expected {expected}, got {actual}",
    'CHECKSUM_TRAILER_MISMATCH': "Checksum trailer mismatch at byte {position}: expected {expected}, got {actual}",
    'VALUE_TRUNCATED': "Value of {length} bytes is too short to carry a checksum (minimum {minimum})",

    'WORKER_FAILED': "Worker {worker} failed during round {round_index}: {error}",

    'CONFIG_FILE_NOT_FOUND': "Configuration file not found: {path}",
    'CONFIG_PARSE_ERROR': (
        "Could not read {path} as YAML.\n"
        "Error: {error}"
    ),

    'INTERNAL_ERROR': (
        "Unexpected error inside the pounder: {error}\n"
        "Rerun with --debug and keep the stack trace when reporting it."
    ),
}


def format_error(error_key: str, **kwargs) -> str:
    """Fill the template ``error_key`` with ``kwargs``.

    Unknown keys and missing parameters still produce a readable message.
    """
    template = ERROR_MESSAGES.get(error_key)
    if template is None:
        return f"Unknown error: {error_key}\nContext: {kwargs}"
    try:
        return template.format(**kwargs)
    except KeyError as missing:
        return f"{template}\n(Missing format parameter: {missing})"


class ErrorFormatter:
    """Renders a ``CachePounderException`` as a header, its context and a suggestion."""

    ANSI = {
        'reset': '\033[0m',
        'bold': '\033[1m',
        'red': '\033[91m',
        'cyan': '\033[96m',
    }

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors

    def _paint(self, text: str, style: str) -> str:
        if not self.use_colors:
            return text
        return f"{self.ANSI[style]}{text}{self.ANSI['reset']}"

    def format_error_header(self, code: str, title: str) -> str:
        return self._paint(f"[{code}] {title}", 'red')

    def format_suggestion(self, suggestion: str) -> str:
        return f"{self._paint('Suggestion:', 'cyan')} {suggestion}"

    def format_details(self, details: Dict[str, Any]) -> str:
        return "\n".join(f"  {self._paint(f'{key}:', 'bold')} {value}" for key, value in details.items())

    def format_exception(self, exc) -> str:
        lines = [self.format_error_header(exc.code.value, exc.error.message)]
        # Unset context fields (e.g. no key for a worker fault) are omitted
        context = {key: value for key, value in exc.error.context.items() if value is not None}
        if context:
            lines.append(self.format_details(context))
        if exc.suggestion:
            lines += ["", self.format_suggestion(exc.suggestion)]
        return "\n".join(lines)
