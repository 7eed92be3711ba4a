"""
Reporting for pounder runs.

Usage:
    from cachepounder.reporting import write_reports
    from cachepounder.reporting.formats import TableFormat, CSVBatchLog
"""

import os
from typing import Any, Dict, Iterable, List, Optional

from cachepounder.reporting.formats import (
    CSVBatchLog,
    FormatConfig,
    FormatRegistry,
    ReportFormat,
)

REPORT_BASENAME = "pounder_report"


def write_reports(results, output_dir: str, formats: Iterable[str],
                  metadata: Optional[Dict[str, Any]] = None, logger=None) -> List[str]:
    """
    Write one report file per requested format into ``output_dir``.

    Returns:
        Paths of the written files.
    """
    written = []
    for format_name in formats:
        format_class = FormatRegistry.get(format_name)
        if format_class is None:
            raise ValueError(f"Unknown report format '{format_name}'. "
                             f"Available: {', '.join(FormatRegistry.available_formats())}")

        handler: ReportFormat = format_class(FormatConfig(output_path=output_dir, include_host_info=True))
        path = os.path.join(output_dir, f"{REPORT_BASENAME}.{handler.extension}")
        handler.generate_to_file(results, path, metadata)
        if logger is not None:
            logger.status(f"Wrote {handler.name} report to {path}")
        written.append(path)
    return written


__all__ = [
    'CSVBatchLog',
    'FormatConfig',
    'FormatRegistry',
    'ReportFormat',
    'REPORT_BASENAME',
    'write_reports',
]
