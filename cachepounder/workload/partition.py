"""
Key space partitioning.

Keys are the strings "K{n}-" for n in [0, entry_count). Worker t of T owns the
contiguous range [floor(N/T) * t, floor(N/T) * (t + 1)). When N is not a
multiple of T the last N % T keys belong to no worker and are never written.
"""

from dataclasses import dataclass
from typing import List

from cachepounder.config import KEY_PREFIX, KEY_SUFFIX


@dataclass(frozen=True)
class KeyRange:
    """Half-open range of key indexes assigned to one worker."""
    worker: int
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def __iter__(self):
        return iter(range(self.start, self.end))

    def __contains__(self, index) -> bool:
        return self.start <= index < self.end


def partition_key_space(entry_count: int, thread_count: int) -> List[KeyRange]:
    """Split [0, entry_count) into thread_count disjoint contiguous ranges."""
    if thread_count <= 0:
        raise ValueError(f"thread_count must be positive, got {thread_count}")
    if entry_count < 0:
        raise ValueError(f"entry_count must not be negative, got {entry_count}")

    per_thread = entry_count // thread_count
    return [KeyRange(worker=t, start=per_thread * t, end=per_thread * (t + 1))
            for t in range(thread_count)]


def make_key(index: int) -> str:
    return f"{KEY_PREFIX}{index}{KEY_SUFFIX}"
