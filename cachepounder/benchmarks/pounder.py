"""
Cache pounder benchmark.

Wires a run together: load and validate the workload configuration, build the
cache collaborator for the configured store type, stream batch samples to
results.csv, drive the warmup and measured rounds, and write the final
reports and run metadata.

Classes:
    PounderBenchmark: Benchmark implementation for the ``run`` and
        ``configview`` commands.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from cachepounder.adapters import create_cache_adapter
from cachepounder.benchmarks.base import Benchmark
from cachepounder.config import DEFAULT_CSV_FILENAME, EXIT_CODE, load_workload_config
from cachepounder.pounder_logging import add_file_handler
from cachepounder.reporting import write_reports
from cachepounder.reporting.formats import CSVBatchLog
from cachepounder.workload import RoundDriver


class PounderBenchmark(Benchmark):
    """Multi-threaded load generator and validator for a cache collaborator.

    Example:
        benchmark = PounderBenchmark(args, logger=logger)
        ret_code = benchmark.run()
    """

    BENCHMARK_TYPE = "pounder"
    LOG_FILENAME = "pounder.log"

    def __init__(self, args, logger=None, run_datetime=None, workload_config=None, cache=None):
        """
        Args:
            args: Parsed command-line arguments.
            logger: Logger instance for output.
            run_datetime: Datetime string for the run.
            workload_config: Pre-built WorkloadConfig; loaded from
                ``args.config_file`` when omitted.
            cache: Pre-built CacheAdapter; created from the configuration
                when omitted.
        """
        super().__init__(args, logger, run_datetime)

        self.workload_config = workload_config or self._load_config()
        self.cache = cache
        self.results = None
        self.report_files: List[str] = []
        self.csv_file_path: Optional[str] = None

        self.command_method_map = {
            "run": self._execute_run,
            "configview": self._execute_configview,
        }

    def _load_config(self):
        overrides = dict(getattr(self.args, 'params', None) or {})
        if getattr(self.args, 'seed', None) is not None:
            overrides['seed'] = self.args.seed
        config_file = self.args.config_file
        self.logger.verbose(f'Loading workload configuration from {config_file}')
        return load_workload_config(config_file, overrides=overrides, logger=self.logger)

    def _run(self):
        command = getattr(self.args, 'command', 'run')
        method = self.command_method_map.get(command)
        if method is None:
            raise ValueError(f'Unsupported command for {self.BENCHMARK_TYPE}: {command}')
        return method()

    def log_configuration(self, level: str = 'status') -> None:
        log = getattr(self.logger, level)
        log("Using configuration:")
        for line in self.workload_config.describe():
            log(f"  {line}")

    def _execute_configview(self):
        self.log_configuration(level='result')
        return EXIT_CODE.SUCCESS

    def _batch_log_path(self) -> Optional[str]:
        if getattr(self.args, 'no_csv', False):
            return None
        return getattr(self.args, 'csv_file', None) or os.path.join(self.run_result_output, DEFAULT_CSV_FILENAME)

    def _execute_run(self):
        self.prepare_output_location()
        file_handler = None
        if isinstance(self.logger, logging.Logger):
            file_handler = add_file_handler(self.logger, os.path.join(self.run_result_output, self.LOG_FILENAME))
        try:
            return self._pound()
        finally:
            if file_handler is not None:
                self.logger.removeHandler(file_handler)
                file_handler.close()

    def _pound(self):
        self.log_configuration()

        if self.cache is None:
            self.cache = create_cache_adapter(self.workload_config, getattr(self.args, 'adapter', None),
                                              logger=self.logger)

        self.csv_file_path = self._batch_log_path()
        batch_log = CSVBatchLog(self.csv_file_path) if self.csv_file_path else None
        driver = RoundDriver(logger=self.logger, sinks=[batch_log] if batch_log else None,
                             show_progress=not getattr(self.args, 'no_progress', False))
        try:
            if batch_log is not None:
                batch_log.open()
                self.logger.verbose(f'Streaming batch samples to {self.csv_file_path}')
            self.results = driver.run(self.workload_config, self.cache)
            self.status = "completed"
        except BaseException as e:
            self.status = "failed"
            self.error = e
            raise
        finally:
            if batch_log is not None:
                batch_log.close()
            self.cache.close()
            if self.status == "failed":
                self.save_metadata()

        for line in self.results.report_lines():
            self.logger.result(line)

        formats = getattr(self.args, 'output_format', None) or []
        self.report_files = write_reports(self.results, self.run_result_output, formats,
                                          metadata=self.metadata, logger=self.logger)
        self.save_metadata()
        return EXIT_CODE.SUCCESS

    @property
    def metadata(self) -> Dict[str, Any]:
        metadata = super().metadata
        metadata['workload_config'] = self.workload_config.as_dict()
        metadata['cache'] = self.cache.describe() if self.cache is not None else None
        metadata['csv_file'] = self.csv_file_path
        metadata['results'] = self.results.as_dict() if self.results is not None else None
        metadata['report_files'] = self.report_files
        return metadata
