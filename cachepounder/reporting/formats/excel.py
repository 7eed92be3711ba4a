"""
Excel format handler for pounder results.

Provides an Excel workbook with a summary sheet, a rounds sheet and a
throughput chart.
"""

import io
from typing import Any, Dict, Optional, TYPE_CHECKING

from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from cachepounder.reporting.formats import FormatConfig, FormatRegistry, ReportFormat
from cachepounder.reporting.formats.csv_format import ROUND_CSV_COLUMNS, CSVFormat

if TYPE_CHECKING:
    from cachepounder.workload.results import RunResults


@FormatRegistry.register
class ExcelFormat(ReportFormat):
    """Format results as an Excel workbook."""

    HEADER_FILL = PatternFill(start_color='366092', end_color='366092', fill_type='solid')
    HEADER_FONT = Font(color='FFFFFF', bold=True)
    WARMUP_FILL = PatternFill(start_color='FFEB9C', end_color='FFEB9C', fill_type='solid')

    def __init__(self, config: Optional[FormatConfig] = None):
        super().__init__(config)

    @property
    def name(self) -> str:
        return "excel"

    @property
    def extension(self) -> str:
        return "xlsx"

    def _style_header_row(self, ws, num_cols: int):
        for col in range(1, num_cols + 1):
            cell = ws.cell(row=1, column=col)
            cell.fill = self.HEADER_FILL
            cell.font = self.HEADER_FONT
            cell.alignment = Alignment(horizontal='center')

    def _auto_adjust_columns(self, ws):
        for column in ws.columns:
            max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
            ws.column_dimensions[get_column_letter(column[0].column)].width = min(max_length + 2, 50)

    def _add_summary_sheet(self, wb: Workbook, results: 'RunResults',
                           metadata: Optional[Dict[str, Any]]) -> None:
        ws = wb.active
        ws.title = "Summary"

        ws['A1'] = f"{results.label} Pounder Final Results"
        ws['A1'].font = Font(size=16, bold=True)
        ws.merge_cells('A1:D1')

        ws['A3'] = "Total time (ms, excluding round 0):"
        ws['B3'] = round(results.total_time_millis, 3)
        ws['A4'] = "Average TPS (excluding round 0):"
        ws['B4'] = results.average_tps if results.average_tps is not None else "n/a"
        ws['A5'] = "Max get latency (ms):"
        ws['B5'] = round(results.max_get_latency_millis, 3)
        ws['A6'] = "Rounds:"
        ws['B6'] = len(results.rounds)

        workload = (metadata or {}).get('workload_config') or {}
        if workload and self.config.include_config:
            ws['A8'] = "Configuration"
            ws['A8'].font = Font(bold=True)
            for offset, (key, value) in enumerate(workload.items()):
                ws.cell(row=9 + offset, column=1, value=key)
                ws.cell(row=9 + offset, column=2, value=str(value) if value is not None else "")

        self._auto_adjust_columns(ws)

    def _add_rounds_sheet(self, wb: Workbook, results: 'RunResults') -> None:
        ws = wb.create_sheet("Rounds")
        for col, header in enumerate(ROUND_CSV_COLUMNS, 1):
            ws.cell(row=1, column=col, value=header)
        self._style_header_row(ws, len(ROUND_CSV_COLUMNS))

        for row, round_ in enumerate(results.rounds, 2):
            values = CSVFormat._round_to_row(round_)
            for col, header in enumerate(ROUND_CSV_COLUMNS, 1):
                cell = ws.cell(row=row, column=col, value=values[header])
                if round_.is_warmup:
                    cell.fill = self.WARMUP_FILL

        self._auto_adjust_columns(ws)

    def _add_chart(self, wb: Workbook) -> None:
        ws = wb['Rounds']
        if ws.max_row < 2:
            return

        tps_col = ROUND_CSV_COLUMNS.index('throughputTPS') + 1
        chart = BarChart()
        chart.type = "col"
        chart.style = 10
        chart.title = "Throughput by Round"
        chart.y_axis.title = "TPS"
        chart.x_axis.title = "Round"

        data = Reference(ws, min_col=tps_col, min_row=1, max_row=ws.max_row)
        categories = Reference(ws, min_col=1, min_row=2, max_row=ws.max_row)
        chart.add_data(data, titles_from_data=True)
        chart.set_categories(categories)
        chart.width = 15
        chart.height = 10

        ws.add_chart(chart, f"{get_column_letter(ws.max_column + 2)}2")

    def create_workbook(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> Workbook:
        wb = Workbook()
        self._add_summary_sheet(wb, results, metadata)
        self._add_rounds_sheet(wb, results)
        self._add_chart(wb)
        return wb

    def generate(self, results: 'RunResults', metadata: Optional[Dict[str, Any]] = None) -> bytes:
        output = io.BytesIO()
        self.create_workbook(results, metadata).save(output)
        output.seek(0)
        return output.read()
