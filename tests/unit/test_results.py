"""
Tests for round metrics and the final summary in cachepounder.workload.results.
"""

import pytest

from cachepounder.config import STORE_TYPES
from cachepounder.workload.results import ResultsAggregator, Round, RunResults


def make_round(index, elapsed=1000.0, size=1000, tps=1000.0):
    return Round(index=index, elapsed_time_millis=elapsed, final_cache_size=size,
                 throughput_tps=tps, operations=1000, reads=0 if index == 0 else 1000,
                 writes=1000 if index == 0 else 0)


@pytest.fixture
def results():
    return RunResults(
        store_type=STORE_TYPES.OFFHEAP,
        rounds=[make_round(0, elapsed=5000.0, tps=200.0),
                make_round(1, elapsed=1000.0, tps=1000.0),
                make_round(2, elapsed=500.0, tps=2000.0)],
        max_get_latency_millis=1.23456,
    )


class TestRound:

    def test_warmup_flag(self):
        assert make_round(0).is_warmup
        assert not make_round(1).is_warmup

    def test_as_dict(self):
        values = make_round(0).as_dict()
        assert values['is_warmup'] is True
        assert values['writes'] == 1000


class TestRunResults:

    def test_warmup_excluded_from_totals(self, results):
        assert results.total_time_millis == 1500.0
        assert results.average_tps == 1500.0
        assert [r.index for r in results.measured_rounds] == [1, 2]

    @pytest.mark.parametrize("store_type,label", [
        (STORE_TYPES.OFFHEAP, "BigMemory"),
        (STORE_TYPES.ONHEAP, "ONHEAP"),
        (STORE_TYPES.DISK, "DISK"),
    ])
    def test_label(self, store_type, label):
        assert RunResults(store_type).label == label

    def test_warmup_only_has_no_average(self):
        results = RunResults(STORE_TYPES.ONHEAP, rounds=[make_round(0)])
        assert results.total_time_millis == 0
        assert results.average_tps is None
        assert "AVG TPS (excluding round 0): n/a" in results.summary_line()

    def test_round_lines(self, results):
        lines = results.round_lines()
        assert lines[0] == "Round 0 (warmup): elapsed time: 5000, final cache size: 1000, tps: 200"
        assert lines[2] == "Round 2: elapsed time: 500, final cache size: 1000, tps: 2000"

    def test_summary_line(self, results):
        assert results.summary_line() == (
            "TOTAL TIME: 1500ms, AVG TPS (excluding round 0): 1500.0 MAX GET LATENCY: 1.235ms")

    def test_report_lines(self, results):
        lines = results.report_lines()
        assert lines[0] == "All Rounds:"
        assert lines[-2] == "BigMemory Pounder Final Results"
        assert len(lines) == 6

    def test_as_dict(self, results):
        values = results.as_dict()
        assert values['store_type'] == 'OFFHEAP'
        assert len(values['rounds']) == 3
        assert values['average_tps'] == 1500.0


class TestResultsAggregator:

    def test_collects_in_order(self):
        aggregator = ResultsAggregator(STORE_TYPES.DISK)
        aggregator.add_round(make_round(0))
        aggregator.add_round(make_round(1))

        results = aggregator.finalize(max_get_latency_millis=0.5)

        assert results.label == "DISK"
        assert [r.index for r in results.rounds] == [0, 1]
        assert results.max_get_latency_millis == 0.5

    def test_rejects_out_of_order_round(self):
        aggregator = ResultsAggregator(STORE_TYPES.DISK)
        with pytest.raises(ValueError):
            aggregator.add_round(make_round(1))

    def test_rounds_is_a_copy(self):
        aggregator = ResultsAggregator(STORE_TYPES.DISK)
        aggregator.add_round(make_round(0))
        aggregator.rounds.clear()
        assert len(aggregator.rounds) == 1
