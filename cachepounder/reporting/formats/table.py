"""
Plain text report: the configuration, one table row per round and the
closing summary lines the pounder logs at the end of a run.
"""

import re
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, TYPE_CHECKING

from cachepounder.reporting.formats import FormatConfig, FormatRegistry, ReportFormat

if TYPE_CHECKING:
    from cachepounder.workload.results import Round, RunResults

ANSI_PATTERN = re.compile(r'\x1b\[[0-9;]*m')


class BoxStyle(NamedTuple):
    rule: str
    column_sep: str
    corner: str
    header_rule: str


BOX_STYLES = {
    'simple': BoxStyle(rule='-', column_sep='|', corner='+', header_rule='-'),
    'grid': BoxStyle(rule='-', column_sep='|', corner='+', header_rule='='),
    'minimal': BoxStyle(rule='', column_sep='  ', corner='', header_rule='-'),
}

ROUND_COLUMNS: List[Tuple[str, Callable[['Round'], str]]] = [
    ('Elapsed (ms)', lambda r: f"{r.elapsed_time_millis:.0f}"),
    ('Final Size', lambda r: str(r.final_cache_size)),
    ('TPS', lambda r: f"{r.throughput_tps:.0f}"),
    ('Reads', lambda r: str(r.reads)),
    ('Writes', lambda r: str(r.writes)),
    ('Misses', lambda r: str(r.cache_misses)),
]


def visible_width(text: str) -> int:
    return len(ANSI_PATTERN.sub('', text))


@FormatRegistry.register
class TableFormat(ReportFormat):

    ANSI = {
        'reset': '\033[0m',
        'bold': '\033[1m',
        'yellow': '\033[93m',
        'cyan': '\033[96m',
    }

    def __init__(self, config: Optional[FormatConfig] = None, style: str = 'simple',
                 use_colors: bool = False):
        super().__init__(config)
        self.box = BOX_STYLES.get(style, BOX_STYLES['simple'])
        self.use_colors = use_colors

    @property
    def name(self) -> str:
        return "table"

    @property
    def extension(self) -> str:
        return "txt"

    def _paint(self, text: str, style: str) -> str:
        if not self.use_colors:
            return text
        return f"{self.ANSI[style]}{text}{self.ANSI['reset']}"

    def _row(self, cells: List[str], widths: List[int]) -> str:
        sep = self.box.column_sep
        padded = (f" {cell}{' ' * (width - visible_width(cell))} " for cell, width in zip(cells, widths))
        return sep + sep.join(padded) + sep

    def _rule(self, widths: List[int], char: str) -> str:
        if not char:
            return ""
        corner = self.box.corner
        return corner + corner.join(char * (width + 2) for width in widths) + corner

    def _round_label(self, round_: 'Round') -> str:
        if round_.is_warmup:
            return self._paint(f"{round_.index} (warmup)", 'yellow')
        return str(round_.index)

    def format_rounds_table(self, results: 'RunResults') -> str:
        if not results.rounds:
            return "No rounds to display."

        headers = ['Round'] + [header for header, _ in ROUND_COLUMNS]
        rows = [[self._round_label(r)] + [cell(r) for _, cell in ROUND_COLUMNS] for r in results.rounds]
        widths = [max(visible_width(row[i]) for row in [headers] + rows) for i in range(len(headers))]

        lines = [self._rule(widths, self.box.rule),
                 self._row(headers, widths),
                 self._rule(widths, self.box.header_rule)]
        lines += [self._row(row, widths) for row in rows]
        lines.append(self._rule(widths, self.box.rule))
        return '\n'.join(line for line in lines if line)

    def format_summary(self, results: 'RunResults') -> str:
        return '\n'.join([
            self._paint(f"{results.label} Pounder Final Results", 'bold'),
            results.summary_line(),
        ])

    def format_config(self, metadata: Dict[str, Any]) -> str:
        workload = metadata.get('workload_config') or {}
        if not workload:
            return ""
        return '\n'.join([self._paint("Configuration", 'cyan')]
                         + [f"  {key}: {value}" for key, value in workload.items()])

    def generate(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> str:
        sections = []
        if metadata and self.config.include_config:
            sections.append(self.format_config(metadata))
        sections.append(self.format_rounds_table(results))
        sections.append(self.format_summary(results))
        return '\n\n'.join(section for section in sections if section) + '\n'
