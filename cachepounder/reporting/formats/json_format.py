"""
JSON format handler for pounder results.

Provides JSON export for programmatic access.
"""

import json
from typing import Any, Dict, Optional, TYPE_CHECKING

from cachepounder.reporting.formats import FormatConfig, FormatRegistry, ReportFormat
from cachepounder.utils import PounderJsonEncoder

if TYPE_CHECKING:
    from cachepounder.workload.results import RunResults


@FormatRegistry.register
class JSONFormat(ReportFormat):
    """Format results as JSON for programmatic access."""

    def __init__(self, config: Optional[FormatConfig] = None, indent: int = 2):
        super().__init__(config)
        self.indent = indent

    @property
    def name(self) -> str:
        return "json"

    @property
    def extension(self) -> str:
        return "json"

    def build_report(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        report = {
            'summary': {
                'label': results.label,
                'store_type': results.store_type.name,
                'rounds': len(results.rounds),
                'total_time_millis': results.total_time_millis,
                'average_tps': results.average_tps,
                'max_get_latency_millis': results.max_get_latency_millis,
            },
            'rounds': [r.as_dict() for r in results.rounds],
        }

        if metadata:
            if self.config.include_config and 'workload_config' in metadata:
                report['workload_config'] = metadata['workload_config']
            if self.config.include_host_info and 'host_info' in metadata:
                report['host_info'] = metadata['host_info']

        return report

    def generate(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> bytes:
        report = self.build_report(results, metadata)
        return json.dumps(report, indent=self.indent, cls=PounderJsonEncoder).encode('utf-8')

    def generate_pretty(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> str:
        return self.generate(results, metadata).decode('utf-8')
