"""
Per-worker batch bookkeeping and progress records.

Every ``batchCount`` operations a worker hands its WorkerState to the
BatchReporter, which measures the batch, folds it into the run-wide maximum
batch latency, samples the cache size, emits a BatchSample to the console and
any registered sinks, and starts the worker's next batch window with a fresh
payload and zeroed counters.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Union

from cachepounder.config import BATCH_CSV_COLUMNS
from cachepounder.utils import process_memory_rss
from cachepounder.workload.access_pattern import AccessPatternSelector
from cachepounder.workload.partition import KeyRange
from cachepounder.workload.stats import AtomicMax
from cachepounder.workload.values import ValueGenerator


@dataclass(frozen=True)
class BatchSample:
    """Progress record emitted at one worker's batch boundary."""
    round: int
    timestamp: int
    cache_size: int
    batch_time_millis: float
    is_warmup: bool
    value_size: int
    read_count: int
    write_count: int
    hot_set_percentage: int

    def as_row(self) -> Dict[str, Union[int, float, bool]]:
        """Values keyed by the batch log column names."""
        values = (self.round, self.timestamp, self.cache_size, round(self.batch_time_millis, 3),
                  self.is_warmup, self.value_size, self.read_count, self.write_count,
                  self.hot_set_percentage)
        return dict(zip(BATCH_CSV_COLUMNS, values))


@dataclass
class WorkerState:
    """Mutable state owned by a single worker thread for one round."""
    key_range: KeyRange
    generator: ValueGenerator
    selector: AccessPatternSelector
    value: bytes = b''
    read_count: int = 0
    write_count: int = 0
    current_size: int = 0
    batch_started: float = field(default_factory=time.perf_counter)
    total_reads: int = 0
    total_writes: int = 0
    cache_misses: int = 0
    batches: int = 0
    progress_reported: int = 0

    @property
    def worker(self) -> int:
        return self.key_range.worker

    @property
    def total_operations(self) -> int:
        return self.total_reads + self.total_writes


BatchSink = Callable[[BatchSample], None]


class BatchReporter:
    """Samples shared state at batch boundaries on behalf of the workers."""

    def __init__(self, config, cache, max_batch_millis: AtomicMax, logger=None,
                 sinks: Optional[Iterable[BatchSink]] = None):
        self.config = config
        self.cache = cache
        self.max_batch_millis = max_batch_millis
        self.logger = logger
        self.sinks: List[BatchSink] = list(sinks or [])

    def add_sink(self, sink: BatchSink) -> None:
        self.sinks.append(sink)

    def report(self, state: WorkerState, round_index: int, is_warmup: bool) -> BatchSample:
        """Close the worker's current batch window and open the next one."""
        batch_time_millis = (time.perf_counter() - state.batch_started) * 1000.0
        max_batch_millis = self.max_batch_millis.update(batch_time_millis)
        current_size = self.cache.size()

        sample = BatchSample(
            round=round_index,
            timestamp=int(time.time() * 1000),
            cache_size=current_size,
            batch_time_millis=batch_time_millis,
            is_warmup=is_warmup,
            value_size=len(state.value),
            read_count=state.read_count,
            write_count=state.write_count,
            hot_set_percentage=self.config.hot_set_percentage,
        )
        self._emit(sample, max_batch_millis)

        state.value = state.generator.generate()
        state.current_size = current_size
        state.read_count = 0
        state.write_count = 0
        state.batches += 1
        state.batch_started = time.perf_counter()
        return sample

    def _emit(self, sample: BatchSample, max_batch_millis: float) -> None:
        if self.logger is not None:
            self.logger.status(self.format_sample(sample, max_batch_millis))
        for sink in self.sinks:
            sink(sample)

    def format_sample(self, sample: BatchSample, max_batch_millis: float) -> str:
        max_batch = "warmup" if sample.is_warmup else f"{max_batch_millis:.3f}"
        line = (f"size: {sample.cache_size} batch time: {sample.batch_time_millis:.3f} "
                f"Max batch time millis: {max_batch} value size: {sample.value_size} "
                f"READ: {sample.read_count} WRITE: {sample.write_count} "
                f"Hotset: {sample.hot_set_percentage}")
        if self.config.monitoring_enabled:
            line += f" RSS MB: {process_memory_rss() / 1024 ** 2:.1f}"
        return line
