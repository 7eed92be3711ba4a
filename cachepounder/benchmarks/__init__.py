from cachepounder.benchmarks.base import Benchmark
from cachepounder.benchmarks.pounder import PounderBenchmark

__all__ = [
    'Benchmark',
    'PounderBenchmark',
]
