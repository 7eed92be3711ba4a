"""
Shared run-wide accumulators.

Workers publish their batch latency and read latency maxima through
AtomicMax. Updates follow a compare-and-set loop: read the current value,
stop if it is already at least as large, otherwise try to swap it in and
retry if another thread won the race. The common case, a sample that does
not raise the maximum, returns after a single unsynchronised read.
"""

import threading
from typing import Union

Number = Union[int, float]


class AtomicLong:
    """A numeric cell with atomic get/set/compare_and_set."""

    def __init__(self, initial: Number = 0):
        self._value = initial
        # Only held for the duration of a single compare and store
        self._swap_lock = threading.Lock()

    def get(self) -> Number:
        return self._value

    def set(self, value: Number) -> None:
        with self._swap_lock:
            self._value = value

    def compare_and_set(self, expected: Number, new_value: Number) -> bool:
        """Store new_value only if the cell still holds expected."""
        with self._swap_lock:
            if self._value != expected:
                return False
            self._value = new_value
            return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class AtomicMax(AtomicLong):
    """Monotonic maximum updated from many threads."""

    def update(self, candidate: Number) -> Number:
        """Raise the stored maximum to ``candidate`` if larger; return the resulting maximum."""
        while True:
            current = self._value
            if candidate <= current:
                return current
            if self.compare_and_set(current, candidate):
                return candidate

    def reset(self) -> None:
        self.set(0)
