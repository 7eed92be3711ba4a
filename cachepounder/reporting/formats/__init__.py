"""
Report formats for a finished pounder run.

Every format renders the same ``RunResults`` (one entry per round plus the
run totals) and may pull the workload configuration and host information out
of the run metadata. Formats register themselves by name so the command line
can offer ``--output-format table csv json excel``:

    from cachepounder.reporting.formats import FormatRegistry

    handler = FormatRegistry.get('json')()
    handler.generate_to_file(results, "pounder_report.json", metadata)

The streamed per-batch ``results.csv`` is written by ``CSVBatchLog`` while the
rounds run, not by a registered format.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from cachepounder.workload.results import RunResults


@dataclass
class FormatConfig:
    output_path: Optional[str] = None
    include_config: bool = True
    include_host_info: bool = False


class ReportFormat(ABC):
    """Renders run results in one output format."""

    def __init__(self, config: Optional[FormatConfig] = None):
        self.config = config or FormatConfig()

    @property
    @abstractmethod
    def name(self) -> str:
        """Name used on the command line and as the registry key."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension without the dot."""

    @abstractmethod
    def generate(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> Union[bytes, str]:
        """Render ``results``; binary formats return bytes."""

    def generate_to_file(self, results: 'RunResults', output_path: str,
                         metadata: Optional[Dict[str, Any]] = None) -> str:
        rendered = self.generate(results, metadata)
        if isinstance(rendered, bytes):
            with open(output_path, 'wb') as f:
                f.write(rendered)
        else:
            with open(output_path, 'w') as f:
                f.write(rendered)
        return output_path


class FormatRegistry:
    """Maps format names to ``ReportFormat`` classes.

    ``register`` doubles as a class decorator.
    """

    _formats: Dict[str, Type[ReportFormat]] = {}

    @classmethod
    def register(cls, format_class: Type[ReportFormat]) -> Type[ReportFormat]:
        cls._formats[format_class().name] = format_class
        return format_class

    @classmethod
    def get(cls, name: str) -> Optional[Type[ReportFormat]]:
        return cls._formats.get(name)

    @classmethod
    def get_all(cls) -> Dict[str, Type[ReportFormat]]:
        return dict(cls._formats)

    @classmethod
    def available_formats(cls) -> List[str]:
        return sorted(cls._formats)


# Imported for their registration side effect
from cachepounder.reporting.formats.table import TableFormat  # noqa: E402
from cachepounder.reporting.formats.csv_format import CSVFormat, CSVBatchLog  # noqa: E402
from cachepounder.reporting.formats.excel import ExcelFormat  # noqa: E402
from cachepounder.reporting.formats.json_format import JSONFormat  # noqa: E402

__all__ = [
    'ReportFormat',
    'FormatConfig',
    'FormatRegistry',
    'TableFormat',
    'CSVFormat',
    'CSVBatchLog',
    'ExcelFormat',
    'JSONFormat',
]
