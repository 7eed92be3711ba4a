from cachepounder.workload.access_pattern import AccessPatternSelector, Operation
from cachepounder.workload.driver import DriverState, RoundDriver
from cachepounder.workload.partition import KeyRange, make_key, partition_key_space
from cachepounder.workload.reporter import BatchReporter, BatchSample, WorkerState
from cachepounder.workload.results import ResultsAggregator, Round, RunResults
from cachepounder.workload.stats import AtomicLong, AtomicMax
from cachepounder.workload.values import ValueGenerator, ValueValidator, validate_value

__all__ = [
    'AccessPatternSelector',
    'Operation',
    'DriverState',
    'RoundDriver',
    'KeyRange',
    'make_key',
    'partition_key_space',
    'BatchReporter',
    'BatchSample',
    'WorkerState',
    'ResultsAggregator',
    'Round',
    'RunResults',
    'AtomicLong',
    'AtomicMax',
    'ValueGenerator',
    'ValueValidator',
    'validate_value',
]
