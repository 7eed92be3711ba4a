"""
CSV format handlers for pounder results.

CSVFormat writes one row per finished round. CSVBatchLog is the streamed
per-batch log (results.csv) that worker threads append to while a run is in
progress; each row is flushed as soon as it is written.
"""

import csv
import io
import threading
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from cachepounder.config import BATCH_CSV_COLUMNS
from cachepounder.errors import ErrorCode, FileSystemError
from cachepounder.reporting.formats import FormatConfig, FormatRegistry, ReportFormat

if TYPE_CHECKING:
    from cachepounder.workload.reporter import BatchSample
    from cachepounder.workload.results import RunResults

ROUND_CSV_COLUMNS = [
    'round', 'isWarmup', 'elapsedTimeMillis', 'finalCacheSize', 'throughputTPS',
    'operations', 'reads', 'writes', 'cacheMisses',
]


@FormatRegistry.register
class CSVFormat(ReportFormat):
    """Format round results as CSV for data analysis."""

    def __init__(self, config: Optional[FormatConfig] = None):
        super().__init__(config)

    @property
    def name(self) -> str:
        return "csv"

    @property
    def extension(self) -> str:
        return "csv"

    @staticmethod
    def _round_to_row(round_) -> Dict[str, Any]:
        return {
            'round': round_.index,
            'isWarmup': round_.is_warmup,
            'elapsedTimeMillis': round(round_.elapsed_time_millis, 3),
            'finalCacheSize': round_.final_cache_size,
            'throughputTPS': round(round_.throughput_tps, 3),
            'operations': round_.operations,
            'reads': round_.reads,
            'writes': round_.writes,
            'cacheMisses': round_.cache_misses,
        }

    def generate_rounds_csv(self, results: 'RunResults') -> str:
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=ROUND_CSV_COLUMNS, lineterminator='\n')
        writer.writeheader()
        writer.writerows(self._round_to_row(r) for r in results.rounds)
        return output.getvalue()

    def generate(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> str:
        return self.generate_rounds_csv(results)


class CSVBatchLog:
    """
    Thread-safe, append-only CSV log of BatchSamples.

    Instances are callable so they can be registered directly as a
    BatchReporter sink.

    Example:
        >>> with CSVBatchLog("results.csv") as batch_log:
        ...     reporter.add_sink(batch_log)
    """

    def __init__(self, path: str, columns: Optional[List[str]] = None):
        self.path = path
        self.columns = columns or list(BATCH_CSV_COLUMNS)
        self.rows_written = 0
        self._lock = threading.Lock()
        self._file = None
        self._writer = None

    def open(self) -> 'CSVBatchLog':
        try:
            self._file = open(self.path, 'w', newline='')
        except PermissionError as e:
            raise FileSystemError(f"Cannot write batch log: {e}", path=self.path, operation="write",
                                  code=ErrorCode.FS_PERMISSION_DENIED) from e
        except FileNotFoundError as e:
            raise FileSystemError(f"Cannot write batch log: {e}", path=self.path, operation="write") from e

        self._writer = csv.DictWriter(self._file, fieldnames=self.columns, lineterminator='\n')
        self._writer.writeheader()
        self._file.flush()
        return self

    def write(self, sample: 'BatchSample') -> None:
        row = sample.as_row()
        with self._lock:
            if self._writer is None:
                raise RuntimeError(f"Batch log {self.path} is not open")
            self._writer.writerow(row)
            self._file.flush()
            self.rows_written += 1

    __call__ = write

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
            self._file = None
            self._writer = None

    def __enter__(self) -> 'CSVBatchLog':
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
