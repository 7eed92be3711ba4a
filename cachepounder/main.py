#!/usr/bin/env python3
"""
Command line entry point for ``cachepounder``.

Runs the selected command and turns every failure into an exit code plus a
formatted message:

    0    rounds completed and every value read back was intact
    1    a worker thread failed
    2    bad options, configuration or --adapter
    3    a value failed checksum validation
    4    a config file or results path was not found
    130  interrupted
"""

import signal
import sys
import traceback

from cachepounder.benchmarks import PounderBenchmark
from cachepounder.cli_parser import parse_arguments
from cachepounder.config import DATETIME_STR, EXIT_CODE, POUNDER_DEBUG
from cachepounder.error_messages import ErrorFormatter, format_error
from cachepounder.errors import (
    CacheAdapterError,
    CachePounderException,
    ConfigurationError,
    DataCorruptionError,
    FileSystemError,
    WorkerFaultError,
)
from cachepounder.pounder_logging import apply_logging_options, setup_logging

logger = setup_logging("CachePounder")
error_formatter = ErrorFormatter(use_colors=True)

# Checked in order; the base class comes last
EXIT_CODE_FOR_ERROR = [
    (ConfigurationError, EXIT_CODE.INVALID_ARGUMENTS),
    (CacheAdapterError, EXIT_CODE.INVALID_ARGUMENTS),
    (DataCorruptionError, EXIT_CODE.DATA_CORRUPTION),
    (WorkerFaultError, EXIT_CODE.FAILURE),
    (FileSystemError, EXIT_CODE.FILE_NOT_FOUND),
    (CachePounderException, EXIT_CODE.FAILURE),
]


def signal_handler(sig, frame):
    logger.warning(f"Received signal {signal.Signals(sig).name} ({sig}), stopping the pounder")
    sys.exit(EXIT_CODE.INTERRUPTED)


def run_benchmark(args, run_datetime):
    return PounderBenchmark(args, run_datetime=run_datetime, logger=logger).run()


def _exit_code_for(error: CachePounderException) -> EXIT_CODE:
    for error_type, exit_code in EXIT_CODE_FOR_ERROR:
        if isinstance(error, error_type):
            return exit_code
    return EXIT_CODE.FAILURE


def _report_pounder_error(error: CachePounderException) -> EXIT_CODE:
    logger.error(error_formatter.format_exception(error))
    if POUNDER_DEBUG and isinstance(error, WorkerFaultError) and error.cause is not None:
        traceback.print_exception(type(error.cause), error.cause, error.cause.__traceback__)
    return _exit_code_for(error)


def main(argv=None):
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, signal_handler)

    try:
        args = parse_arguments(argv)
        if POUNDER_DEBUG:
            args.debug = True
        apply_logging_options(logger, args)
        return run_benchmark(args, DATETIME_STR)

    except CachePounderException as e:
        return _report_pounder_error(e)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_CODE.INTERRUPTED

    except Exception as e:
        logger.error(format_error('INTERNAL_ERROR', error=e))
        if POUNDER_DEBUG:
            traceback.print_exc()
        else:
            logger.info("Run with POUNDER_DEBUG=true for full stack trace")
        return EXIT_CODE.FAILURE


if __name__ == "__main__":
    sys.exit(main())
