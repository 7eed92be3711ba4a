"""
Round orchestration.

A run moves through IDLE -> WARMUP (round 0) -> MEASURING (rounds 1..n-1) ->
DONE. Each round partitions the key space, starts exactly ``thread_count``
workers on a fresh thread pool and waits for all of them before sampling the
round's elapsed time and final cache size.

The first worker failure sets a shared abort event. The remaining workers
stop before their next operation, the pool is joined, and the failure is
re-raised from the driver thread: DataCorruptionError as-is, anything else
wrapped in WorkerFaultError. There are no retries and no partial results.
"""

import enum
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np

from cachepounder.error_messages import format_error
from cachepounder.errors import DataCorruptionError, WorkerFaultError
from cachepounder.progress import progress_context
from cachepounder.workload.access_pattern import AccessPatternSelector, Operation
from cachepounder.workload.partition import make_key, partition_key_space
from cachepounder.workload.reporter import BatchReporter, BatchSink, WorkerState
from cachepounder.workload.results import ResultsAggregator, Round, RunResults
from cachepounder.workload.stats import AtomicMax
from cachepounder.workload.values import ValueGenerator, ValueValidator


class DriverState(enum.Enum):
    IDLE = "idle"
    WARMUP = "warmup"
    MEASURING = "measuring"
    DONE = "done"
    FAILED = "failed"


class RoundDriver:
    """Runs the warmup round and the measured rounds against one cache."""

    def __init__(self, logger=None, sinks: Optional[Iterable[BatchSink]] = None,
                 show_progress: bool = True):
        self.logger = logger
        self.sinks = list(sinks or [])
        self.show_progress = show_progress
        self.state = DriverState.IDLE

        self.max_batch_millis = AtomicMax(0)
        self.max_get_millis = AtomicMax(0)
        self.validator = ValueValidator()
        self._abort = threading.Event()

        self.config = None
        self.cache = None
        self.reporter: Optional[BatchReporter] = None
        self._seed_sequence: Optional[np.random.SeedSequence] = None

    def _log(self, level: str, message: str) -> None:
        if self.logger is not None:
            getattr(self.logger, level)(message)

    def run(self, config, cache) -> RunResults:
        """
        Execute every configured round against ``cache``.

        Args:
            config: A validated WorkloadConfig.
            cache: A CacheAdapter safe for concurrent put/get/size.

        Returns:
            RunResults for all rounds, including the warmup.

        Raises:
            DataCorruptionError: A read-back value failed validation.
            WorkerFaultError: A worker failed for any other reason.
        """
        if self.state is not DriverState.IDLE:
            raise RuntimeError(f"RoundDriver can only run once (state: {self.state.value})")

        self.config = config
        self.cache = cache
        self.reporter = BatchReporter(config, cache, self.max_batch_millis, logger=self.logger,
                                      sinks=self.sinks)
        self._seed_sequence = np.random.SeedSequence(config.seed)
        aggregator = ResultsAggregator(config.store_type)

        self._log('status', f"Starting with threadCount: {config.thread_count} "
                            f"entryCount: {config.entry_count} Max Length: {config.max_value_size}")
        try:
            for round_index in range(config.rounds):
                is_warmup = round_index == 0
                self.state = DriverState.WARMUP if is_warmup else DriverState.MEASURING

                self._log('status', f"ROUND {round_index} size: {cache.size()}")
                round_ = self.run_round(round_index, is_warmup)
                self._log('status', f"Took: {round_.elapsed_time_millis:.0f} final size was "
                                    f"{round_.final_cache_size} TPS: {round_.throughput_tps:.0f}")
                aggregator.add_round(round_)

                if is_warmup:
                    # Warmup batch times never count towards the reported maximum
                    self.max_batch_millis.reset()
        except BaseException:
            self.state = DriverState.FAILED
            raise

        self.state = DriverState.DONE
        return aggregator.finalize(self.max_get_millis.get())

    def run_round(self, round_index: int, is_warmup: bool) -> Round:
        config = self.config
        key_ranges = partition_key_space(config.entry_count, config.thread_count)
        generators = [np.random.default_rng(seed) for seed in self._seed_sequence.spawn(len(key_ranges))]
        states = [self._new_worker_state(key_range, rng) for key_range, rng in zip(key_ranges, generators)]

        description = f"Round {round_index}" + (" (warmup)" if is_warmup else "")
        started = time.perf_counter()
        if self.show_progress:
            with progress_context(description, total=config.operations_per_round, logger=self.logger) as (update, _):
                failure = self._run_workers(states, round_index, is_warmup, update)
        else:
            failure = self._run_workers(states, round_index, is_warmup, None)
        elapsed_millis = (time.perf_counter() - started) * 1000.0

        if failure is not None:
            raise self._round_failure(round_index, *failure)

        for state in states:
            self._log('verbose', f"Worker {state.worker} keys [{state.key_range.start}, {state.key_range.end}): "
                                 f"reads: {state.total_reads} writes: {state.total_writes} "
                                 f"misses: {state.cache_misses} batches: {state.batches}")

        operations = sum(state.total_operations for state in states)
        elapsed_seconds = elapsed_millis / 1000.0
        return Round(
            index=round_index,
            elapsed_time_millis=elapsed_millis,
            final_cache_size=self.cache.size(),
            throughput_tps=operations / elapsed_seconds if elapsed_seconds > 0 else 0.0,
            operations=operations,
            reads=sum(state.total_reads for state in states),
            writes=sum(state.total_writes for state in states),
            cache_misses=sum(state.cache_misses for state in states),
        )

    def _new_worker_state(self, key_range, rng: np.random.Generator) -> WorkerState:
        return WorkerState(
            key_range=key_range,
            generator=ValueGenerator(self.config.min_value_size, self.config.max_value_size, rng),
            selector=AccessPatternSelector(rng),
        )

    def _run_workers(self, states: List[WorkerState], round_index: int, is_warmup: bool,
                     on_progress: Optional[Callable]) -> Optional[Tuple[WorkerState, BaseException]]:
        """Run one worker per state and wait for all of them; return the first failure."""
        failure = None
        executor = ThreadPoolExecutor(max_workers=len(states), thread_name_prefix=f"pounder-r{round_index}")
        try:
            future_to_state = {
                executor.submit(self.execute_load, state, round_index, is_warmup, on_progress): state
                for state in states
            }
            for future in as_completed(future_to_state):
                exc = future.exception()
                if exc is not None and failure is None:
                    failure = (future_to_state[future], exc)
                    self._abort.set()
        except BaseException:
            # Interrupted while waiting; stop the workers before joining them
            self._abort.set()
            raise
        finally:
            executor.shutdown(wait=True)
        return failure

    def _round_failure(self, round_index: int, state: WorkerState, exc: BaseException) -> Exception:
        self._log('error', format_error('WORKER_FAILED', worker=state.worker,
                                        round_index=round_index, error=exc))
        if isinstance(exc, DataCorruptionError):
            return exc
        wrapped = WorkerFaultError(
            format_error('WORKER_FAILED', worker=state.worker, round_index=round_index, error=exc),
            worker=state.worker,
            round_index=round_index,
            cause=exc,
        )
        wrapped.__cause__ = exc
        return wrapped

    def execute_load(self, state: WorkerState, round_index: int, is_warmup: bool,
                     on_progress: Optional[Callable] = None) -> WorkerState:
        """
        The per-worker load loop over the worker's own key range, in index order.

        The batch boundary check runs before the operation at each index, on
        the global key index, so a worker whose range starts on a multiple of
        batch_count reports before its first operation.
        """
        config = self.config
        cache = self.cache
        batch_count = config.batch_count

        state.value = state.generator.generate()
        state.current_size = cache.size()
        state.batch_started = time.perf_counter()

        for index in state.key_range:
            if self._abort.is_set():
                break

            if (index + 1) % batch_count == 0:
                self.reporter.report(state, round_index, is_warmup)
                if on_progress is not None:
                    on_progress(advance=state.total_operations - state.progress_reported)
                    state.progress_reported = state.total_operations

            operation = state.selector.decide_operation(is_warmup, config.update_percentage)
            if operation is Operation.WRITE:
                cache.put(make_key(index), state.value)
                state.write_count += 1
                state.total_writes += 1
            else:
                read_index = state.selector.decide_read_key(
                    config.hot_set_percentage, config.max_on_heap_count, state.current_size)
                self.read_entry(state, make_key(read_index))
                state.read_count += 1
                state.total_reads += 1

        if on_progress is not None and state.total_operations > state.progress_reported:
            on_progress(advance=state.total_operations - state.progress_reported)
            state.progress_reported = state.total_operations
        return state

    def read_entry(self, state: WorkerState, key: str) -> None:
        """Read ``key``, record the read latency and validate a hit; a miss is a no-op."""
        started = time.perf_counter()
        value = self.cache.get(key)
        self.max_get_millis.update((time.perf_counter() - started) * 1000.0)

        if value is None:
            state.cache_misses += 1
            return
        self.validator.validate(value, key=key)
