"""
Read/write mix and hot/cold key selection.

Each worker owns an AccessPatternSelector backed by its own generator, so
no random state is shared between threads. Both decisions are independent
uniform draws in [0, 100) compared against a percentage.
"""

import enum
from typing import Optional

import numpy as np


class Operation(enum.Enum):
    WRITE = "write"
    READ = "read"


class AccessPatternSelector:
    """Decides, per operation, write vs read and hot vs cold key."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def _percentile_draw(self) -> int:
        return int(self.rng.integers(0, 100))

    def decide_operation(self, is_warmup: bool, update_percentage: int) -> Operation:
        """Warmup is all writes; otherwise write with probability update_percentage/100."""
        if is_warmup:
            return Operation.WRITE
        if self._percentile_draw() < update_percentage:
            return Operation.WRITE
        return Operation.READ

    def is_hot_read(self, hot_set_percentage: int) -> bool:
        return self._percentile_draw() < hot_set_percentage

    def decide_read_key(self, hot_set_percentage: int, max_on_heap_count: int,
                        cache_size_at_last_batch: int) -> int:
        """
        Pick the key index for a read.

        With probability hot_set_percentage/100 the index is uniform over the
        hot range [0, max_on_heap_count), otherwise uniform over
        [0, cache_size_at_last_batch). ``cache_size_at_last_batch`` is the
        size sampled at the worker's most recent batch boundary, not the live
        size. An empty range collapses to index 0.
        """
        if self.is_hot_read(hot_set_percentage):
            bound = max_on_heap_count
        else:
            bound = cache_size_at_last_batch
        return int(self.rng.integers(0, max(bound, 1)))
