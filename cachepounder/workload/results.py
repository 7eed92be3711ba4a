"""
Round metrics and the final run summary.

Round 0 is the all-write warmup. It is kept in the per-round listing but is
always left out of the total time and the averaged throughput.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from cachepounder.config import STORE_TYPES

# Final results header name; other store types use their own name
STORE_TYPE_LABELS = {STORE_TYPES.OFFHEAP: "BigMemory"}


@dataclass(frozen=True)
class Round:
    """Metrics of one completed round."""
    index: int
    elapsed_time_millis: float
    final_cache_size: int
    throughput_tps: float
    operations: int = 0
    reads: int = 0
    writes: int = 0
    cache_misses: int = 0

    @property
    def is_warmup(self) -> bool:
        return self.index == 0

    def as_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        values['is_warmup'] = self.is_warmup
        return values


@dataclass
class RunResults:
    """Every round of a run plus the run-wide read latency maximum."""
    store_type: STORE_TYPES
    rounds: List[Round] = field(default_factory=list)
    max_get_latency_millis: float = 0.0

    @property
    def label(self) -> str:
        return STORE_TYPE_LABELS.get(self.store_type, self.store_type.name)

    @property
    def measured_rounds(self) -> List[Round]:
        return [r for r in self.rounds if not r.is_warmup]

    @property
    def total_time_millis(self) -> float:
        return sum(r.elapsed_time_millis for r in self.measured_rounds)

    @property
    def average_tps(self) -> Optional[float]:
        """Mean throughput of the measured rounds, None when only the warmup ran."""
        measured = self.measured_rounds
        if not measured:
            return None
        return sum(r.throughput_tps for r in measured) / len(measured)

    def round_lines(self) -> List[str]:
        lines = []
        for r in self.rounds:
            suffix = " (warmup)" if r.is_warmup else ""
            lines.append(f"Round {r.index}{suffix}: elapsed time: {r.elapsed_time_millis:.0f}, "
                         f"final cache size: {r.final_cache_size}, tps: {r.throughput_tps:.0f}")
        return lines

    def summary_line(self) -> str:
        average = "n/a" if self.average_tps is None else f"{self.average_tps:.1f}"
        return (f"TOTAL TIME: {self.total_time_millis:.0f}ms, AVG TPS (excluding round 0): {average} "
                f"MAX GET LATENCY: {self.max_get_latency_millis:.3f}ms")

    def report_lines(self) -> List[str]:
        return ["All Rounds:", *self.round_lines(),
                f"{self.label} Pounder Final Results", self.summary_line()]

    def as_dict(self) -> Dict[str, Any]:
        return {
            'store_type': self.store_type.name,
            'rounds': [r.as_dict() for r in self.rounds],
            'total_time_millis': self.total_time_millis,
            'average_tps': self.average_tps,
            'max_get_latency_millis': self.max_get_latency_millis,
        }


class ResultsAggregator:
    """Collects rounds in order and produces the final RunResults."""

    def __init__(self, store_type: STORE_TYPES):
        self.store_type = store_type
        self._rounds: List[Round] = []

    @property
    def rounds(self) -> List[Round]:
        return list(self._rounds)

    def add_round(self, round_: Round) -> None:
        if round_.index != len(self._rounds):
            raise ValueError(f"Expected round {len(self._rounds)}, got round {round_.index}")
        self._rounds.append(round_)

    def finalize(self, max_get_latency_millis: float) -> RunResults:
        return RunResults(store_type=self.store_type, rounds=list(self._rounds),
                          max_get_latency_millis=max_get_latency_millis)
