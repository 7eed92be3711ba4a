import abc
import json
import os
import sys
import time

from cachepounder.config import DATETIME_STR, DEFAULT_RESULTS_DIR, POUNDER_DEBUG
from cachepounder.errors import ErrorCode, FileSystemError
from cachepounder.pounder_logging import setup_logging, apply_logging_options
from cachepounder.utils import PounderJsonEncoder, collect_host_info


class Benchmark(abc.ABC):
    """A command run against one results directory.

    Each run owns ``<results_dir>/<BENCHMARK_TYPE>/<run_datetime>/`` and
    leaves a ``<type>_<datetime>_metadata.json`` there describing the
    arguments, the host, the run status and whatever the subclass adds in
    ``metadata``.
    """

    BENCHMARK_TYPE = None

    def __init__(self, args, logger=None, run_datetime=None) -> None:
        if not self.BENCHMARK_TYPE:
            raise ValueError(f'{type(self).__name__} does not set BENCHMARK_TYPE')

        self.args = args
        self.debug = POUNDER_DEBUG or getattr(args, 'debug', False)
        self.logger = logger or self._default_logger()
        self.run_datetime = run_datetime or DATETIME_STR

        self.runtime = 0
        self.status = None
        self.error = None

        results_dir = getattr(args, 'results_dir', None) or DEFAULT_RESULTS_DIR
        self.run_result_output = os.path.join(results_dir, self.BENCHMARK_TYPE, self.run_datetime)
        self.metadata_filename = f"{self.BENCHMARK_TYPE}_{self.run_datetime}_metadata.json"
        self.metadata_file_path = os.path.join(self.run_result_output, self.metadata_filename)

    def _default_logger(self):
        logger = setup_logging(name=f"{self.BENCHMARK_TYPE}_benchmark")
        logger.warning('Benchmark did not get a logger passed. Using default logger.')
        apply_logging_options(logger, self.args)
        return logger

    def prepare_output_location(self) -> str:
        try:
            os.makedirs(self.run_result_output, exist_ok=True)
        except PermissionError as e:
            raise FileSystemError(f"Cannot create results directory: {e}", path=self.run_result_output,
                                  operation="mkdir", code=ErrorCode.FS_PERMISSION_DENIED) from e
        self.logger.status(f'Benchmark results directory: {self.run_result_output}')
        return self.run_result_output

    @property
    def metadata(self):
        try:
            args = vars(self.args)
        except TypeError:
            args = str(self.args)
        return {
            'benchmark_type': self.BENCHMARK_TYPE,
            'command': getattr(self.args, 'command', None),
            'run_datetime': self.run_datetime,
            'result_dir': self.run_result_output,
            'runtime': self.runtime,
            'status': self.status,
            'error': str(self.error) if self.error else None,
            'host_info': collect_host_info(),
            'args': args,
        }

    def write_metadata(self):
        metadata = self.metadata
        with open(self.metadata_file_path, 'w') as fd:
            json.dump(metadata, fd, indent=2, cls=PounderJsonEncoder)
        if self.debug:
            json.dump(metadata, sys.stdout, indent=2, cls=PounderJsonEncoder)

    def save_metadata(self):
        """Write the metadata file, downgrading I/O failures to a warning."""
        self.logger.status(f'Writing metadata for benchmark to: {self.metadata_file_path}')
        try:
            self.write_metadata()
        except OSError as e:
            self.logger.warning(f"Failed to write metadata: {e}")

    @abc.abstractmethod
    def _run(self):
        """Execute the selected command and return an EXIT_CODE."""

    def run(self):
        started = time.perf_counter()
        try:
            return self._run()
        finally:
            self.runtime = time.perf_counter() - started
