"""
Tests for the Benchmark base class and PounderBenchmark.

Tests cover:
- Configuration loading with --param and --seed overrides
- Output directory layout and metadata
- The streamed batch log and report files of a run
- Failure handling: metadata is still written and the cache is closed
"""

import csv
import json
import os
from unittest.mock import patch

import pytest

from cachepounder.benchmarks import Benchmark, PounderBenchmark
from cachepounder.config import EXIT_CODE, WorkloadConfig
from cachepounder.errors import ConfigurationError, DataCorruptionError, FileSystemError
from tests.fixtures import (
    ClosingSpyAdapter,
    CorruptingCacheAdapter,
    MockLogger,
    create_sample_config,
    create_sample_run_args,
)


@pytest.fixture
def logger():
    return MockLogger()


@pytest.fixture
def run_args(tmp_path, config_file):
    return create_sample_run_args(str(tmp_path / "results"), str(config_file))


def make_benchmark(args, logger, **kwargs):
    return PounderBenchmark(args, logger=logger, run_datetime="20260101_120000", **kwargs)


class TestBenchmarkBase:

    def test_requires_benchmark_type(self, run_args, logger):
        class Untyped(Benchmark):
            def _run(self):
                return EXIT_CODE.SUCCESS

        with pytest.raises(ValueError):
            Untyped(run_args, logger=logger)

    def test_output_location(self, run_args, logger):
        benchmark = make_benchmark(run_args, logger)
        assert benchmark.run_result_output == os.path.join(run_args.results_dir, "pounder", "20260101_120000")
        assert benchmark.metadata_filename == "pounder_20260101_120000_metadata.json"

    def test_default_logger(self, run_args):
        with patch('cachepounder.benchmarks.base.setup_logging') as mock_setup:
            benchmark = PounderBenchmark(run_args)
        mock_setup.assert_called_once_with(name="pounder_benchmark")
        benchmark.logger.warning.assert_called_once()

    def test_records_runtime(self, run_args, logger):
        benchmark = make_benchmark(run_args, logger)
        benchmark.run()
        assert benchmark.runtime > 0


class TestPounderBenchmarkConfig:

    def test_loads_config_file(self, run_args, logger):
        benchmark = make_benchmark(run_args, logger)
        assert benchmark.workload_config.thread_count == 4
        assert benchmark.workload_config.seed is None

    def test_params_and_seed_override(self, run_args, logger):
        run_args.params = {'threadCount': 2, 'rounds': 3}
        run_args.seed = 99

        config = make_benchmark(run_args, logger).workload_config

        assert (config.thread_count, config.rounds, config.seed) == (2, 3, 99)

    def test_invalid_override(self, run_args, logger):
        run_args.params = {'rounds': 0}
        with pytest.raises(ConfigurationError):
            make_benchmark(run_args, logger)

    def test_missing_config_file(self, run_args, logger, tmp_path):
        run_args.config_file = str(tmp_path / "nope.yml")
        with pytest.raises(FileSystemError):
            make_benchmark(run_args, logger)

    def test_configview(self, run_args, logger, tmp_path):
        run_args.command = 'configview'
        assert make_benchmark(run_args, logger).run() == EXIT_CODE.SUCCESS

        logger.assert_logged('result', 'Using configuration:')
        logger.assert_logged('result', '  threadCount: 4')
        assert not (tmp_path / "results").exists()

    def test_unsupported_command(self, run_args, logger):
        run_args.command = 'reportgen'
        with pytest.raises(ValueError):
            make_benchmark(run_args, logger).run()


class TestPounderBenchmarkRun:

    def test_successful_run(self, run_args, logger):
        benchmark = make_benchmark(run_args, logger)

        assert benchmark.run() == EXIT_CODE.SUCCESS
        assert benchmark.status == "completed"
        assert [r.index for r in benchmark.results.rounds] == [0, 1]

        logger.assert_logged('result', 'All Rounds:')
        logger.assert_logged('result', 'BigMemory Pounder Final Results')
        logger.assert_logged('result', 'AVG TPS (excluding round 0)')
        logger.assert_logged('status', 'Using configuration:')

    def test_batch_log(self, run_args, logger):
        benchmark = make_benchmark(run_args, logger)
        benchmark.run()

        path = os.path.join(benchmark.run_result_output, "results.csv")
        assert benchmark.csv_file_path == path
        with open(path) as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 20
        assert sum(row['isWarmup'] == 'True' for row in rows) == 10

    def test_custom_csv_path(self, run_args, logger, tmp_path):
        run_args.csv_file = str(tmp_path / "batches.csv")
        make_benchmark(run_args, logger).run()
        assert (tmp_path / "batches.csv").exists()

    def test_no_csv(self, run_args, logger):
        run_args.no_csv = True
        benchmark = make_benchmark(run_args, logger)
        benchmark.run()

        assert benchmark.csv_file_path is None
        assert not os.path.exists(os.path.join(benchmark.run_result_output, "results.csv"))

    def test_metadata_file(self, run_args, logger):
        run_args.output_format = ['json', 'table']
        benchmark = make_benchmark(run_args, logger)
        benchmark.run()

        with open(benchmark.metadata_file_path) as f:
            metadata = json.load(f)

        assert metadata['benchmark_type'] == 'pounder'
        assert metadata['status'] == 'completed'
        assert metadata['workload_config']['entryCount'] == 1000
        assert metadata['cache']['adapter'] == 'MemoryCacheAdapter'
        assert len(metadata['results']['rounds']) == 2
        assert [os.path.basename(p) for p in metadata['report_files']] == [
            'pounder_report.json', 'pounder_report.txt']

    def test_uses_injected_cache_and_closes_it(self, run_args, logger):
        config = WorkloadConfig.from_mapping(create_sample_config())
        cache = ClosingSpyAdapter(config)

        make_benchmark(run_args, logger, workload_config=config, cache=cache).run()

        assert cache.closed

    def test_corruption_still_writes_metadata(self, run_args, logger):
        config = WorkloadConfig.from_mapping(create_sample_config())
        benchmark = make_benchmark(run_args, logger, workload_config=config,
                                   cache=CorruptingCacheAdapter(config))

        with pytest.raises(DataCorruptionError):
            benchmark.run()

        assert benchmark.status == "failed"
        with open(benchmark.metadata_file_path) as f:
            metadata = json.load(f)
        assert metadata['status'] == 'failed'
        assert 'Checksum header mismatch' in metadata['error']
        assert metadata['results'] is None

    def test_adapter_from_args(self, run_args, logger):
        run_args.adapter = "tests.fixtures.fault_adapters:CountingCacheAdapter"
        benchmark = make_benchmark(run_args, logger)
        benchmark.run()

        assert type(benchmark.cache).__name__ == "CountingCacheAdapter"
        assert benchmark.cache.puts == 1000
