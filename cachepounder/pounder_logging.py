"""
Logging for pounder runs.

Four levels sit between the stock ones: RESULT for the final report, STATUS
for round boundaries and per-batch progress lines, VERBOSE for the per-worker
counts after each round and VERBOSER for anything finer. Every level gets
a method on ``PounderLogger`` so callers write ``logger.status(...)`` the
same way they write ``logger.info(...)``.

Worker threads log concurrently. The stream formatter keeps lines short and
the debug and file formats carry the thread name, which identifies the round
and worker (``pounder-r<round>_<n>``).
"""
import datetime
import enum
import logging
import sys

CRITICAL = logging.CRITICAL
FATAL = CRITICAL
ERROR = logging.ERROR
RESULT = 35
WARNING = logging.WARNING
WARN = WARNING
STATUS = 25
INFO = logging.INFO
VERBOSE = 19
VERBOSER = 18
DEBUG = logging.DEBUG
NOTSET = logging.NOTSET

DEFAULT_STREAM_LOG_LEVEL = INFO
FILE_LOG_FORMAT = "%(asctime)s|%(levelname)s:%(threadName)s: %(message)s"

POUNDER_LEVELS = {
    'RESULT': RESULT,
    'STATUS': STATUS,
    'VERBOSE': VERBOSE,
    'VERBOSER': VERBOSER,
}


class Ansi(enum.Enum):
    reset = "\033[0m"
    yellow = "\033[0;33m"
    green = "\033[0;32m"
    bold_red = "\033[1;31m"
    bold_blue = "\033[1;34m"


LEVEL_STYLES = {
    CRITICAL: Ansi.bold_red,
    ERROR: Ansi.bold_red,
    RESULT: Ansi.green,
    WARNING: Ansi.yellow,
    STATUS: Ansi.bold_blue,
}


class PounderLogger(logging.Logger):
    """Logger with one method per pounder level.

    ``_log`` builds the record itself so that ``findCaller`` walks past both
    this class and the generated level method and reports the real call site.
    """

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=3):
        filename, lineno, func, sinfo = self.findCaller(stack_info, stacklevel)
        if isinstance(exc_info, BaseException):
            exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
        elif exc_info and not isinstance(exc_info, tuple):
            exc_info = sys.exc_info()
        self.handle(self.makeRecord(self.name, level, filename, lineno, msg, args,
                                    exc_info, func, extra, sinfo))


def _level_method(levelno):
    def emit(self, message, *args, **kwargs):
        if self.isEnabledFor(levelno):
            self._log(levelno, message, args, **kwargs)
    return emit


for _name, _levelno in POUNDER_LEVELS.items():
    logging.addLevelName(_levelno, _name)
    setattr(PounderLogger, _name.lower(), _level_method(_levelno))


class ColoredStandardFormatter(logging.Formatter):
    """``<time>|<LEVEL>: <message>`` tinted by level."""

    def prefix(self, record):
        return f"{record.levelname}: "

    def format(self, record):
        stamp = datetime.datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        style = LEVEL_STYLES.get(record.levelno, Ansi.reset).value
        return f"{style}{stamp}|{self.prefix(record)}{record.getMessage()}{Ansi.reset.value}"


class ColoredDebugFormatter(ColoredStandardFormatter):
    """Adds thread, module and line so interleaved worker output can be told apart."""

    def prefix(self, record):
        return f"{record.levelname}:{record.threadName}:{record.module}:{record.lineno}: "


def setup_logging(name=__name__, stream_log_level=DEFAULT_STREAM_LOG_LEVEL):
    if isinstance(stream_log_level, str):
        stream_log_level = logging.getLevelName(stream_log_level.upper())

    pounder_logger = PounderLogger(name)
    pounder_logger.setLevel(DEBUG)

    console = logging.StreamHandler()
    console.setFormatter(ColoredStandardFormatter())
    console.setLevel(stream_log_level)
    pounder_logger.addHandler(console)
    return pounder_logger


def add_file_handler(pounder_logger, log_file, level=DEBUG):
    """Mirror everything at or above ``level`` into ``log_file`` without colors."""
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    file_handler.setLevel(level)
    pounder_logger.addHandler(file_handler)
    return file_handler


def _console_handlers(pounder_logger):
    return [h for h in pounder_logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)]


def apply_logging_options(pounder_logger, args):
    """Apply --verbose, --debug and --stream-log-level to the console handlers.

    File handlers keep the level they were created with.
    """
    if args is None:
        return

    for handler in _console_handlers(pounder_logger):
        if getattr(args, "verbose", False):
            handler.setLevel(min(handler.level, VERBOSE))
        if getattr(args, "debug", False):
            handler.setFormatter(ColoredDebugFormatter())
            handler.setLevel(min(handler.level, DEBUG))
        if getattr(args, "stream_log_level", None):
            handler.setLevel(args.stream_log_level.upper())
