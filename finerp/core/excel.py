"""
Excel (.xlsx) generation.

`generate_excel` writes a single styled table (ledger, journal, invoice and
bill exports). `build_financial_workbook` writes the multi-sheet financial
reports workbook with formulas, indentation, conditional colours and charts.
"""
import io
import re
from typing import Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.chart import BarChart, DoughnutChart, RadarChart, Reference
from openpyxl.formatting.rule import CellIsRule
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from finerp.core.i18n import Translator
from finerp.schemas.report import ReportSheet

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MAX_SHEET_TITLE = 31
_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

# Financial workbook column widths: description, then figures, analysis last
REPORT_COLUMN_WIDTHS = [40, 15, 15, 15, 15, 50]

# Sheets carrying graded (trend) and analysis columns, by 1-based column
RATED_COLUMNS = {
    "trendAnalysis": (5, 6),
    "industryAnalysis": (3, 4),
    "financialRatios": (3, 4),
}

TREND_COLORS = {
    "Excellent": "008000",
    "Strong Growth": "008000",
    "Positive": "008000",
    "Undervalued": "008000",
    "Good": "0066CC",
    "Growth": "0066CC",
    "Fairly valued": "0066CC",
    "Fair": "FF9900",
    "Decline": "FF9900",
    "Poor": "FF0000",
    "Strong Decline": "FF0000",
    "Negative": "FF0000",
    "Overvalued": "FF0000",
}

RADAR_KEYS = ["currentRatio", "quickRatio", "cashRatio", "grossProfitMargin", "operatingMargin", "netProfitMargin"]
BAR_KEYS = ["assetTurnover", "inventoryTurnover", "receivablesTurnover", "payablesTurnover"]
DOUGHNUT_KEYS = ["totalLiabilities", "totalEquity"]

# Helper block on the ratios sheet that the charts read from
CHART_LABEL_COLUMN = 8
CHART_VALUE_COLUMN = 9


def safe_sheet_title(title: str) -> str:
    cleaned = _INVALID_TITLE_CHARS.sub(" ", title).strip()
    return cleaned[:MAX_SHEET_TITLE] or "Sheet"


def _save(wb: Workbook) -> bytes:
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def _write_header(ws: Worksheet, headers: Sequence[str]) -> None:
    for col_idx, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = THIN_BORDER


def generate_excel(
    sheet_name: str,
    headers: List[str],
    rows: List[list],
    column_widths: Optional[List[int]] = None,
) -> bytes:
    """Write one table to a workbook and return the file bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = safe_sheet_title(sheet_name)

    _write_header(ws, headers)
    for row_idx, values in enumerate(rows, 2):
        for col_idx, value in enumerate(values, 1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.border = THIN_BORDER
            if isinstance(value, str) and "\n" in value:
                cell.alignment = Alignment(wrap_text=True, vertical="top")

    for col_idx, header in enumerate(headers, 1):
        if column_widths and col_idx <= len(column_widths):
            width = column_widths[col_idx - 1]
        else:
            longest = max([len(str(header))] + [len(str(r[col_idx - 1])) for r in rows if col_idx <= len(r)])
            width = min(max(longest + 2, 12), 50)
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    ws.freeze_panes = "A2"
    return _save(wb)


def _format_report_sheet(ws: Worksheet, sheet: ReportSheet) -> None:
    ncols = len(sheet.headers)
    for col_idx in range(1, ncols + 1):
        width = REPORT_COLUMN_WIDTHS[min(col_idx, len(REPORT_COLUMN_WIDTHS)) - 1]
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    rated = RATED_COLUMNS.get(sheet.name)
    if rated:
        # The analysis column is always the wide one
        ws.column_dimensions[get_column_letter(rated[1])].width = REPORT_COLUMN_WIDTHS[-1]

    for offset, level in enumerate(sheet.levels):
        row = offset + 2
        label = ws.cell(row=row, column=1)
        label.font = Font(bold=level == 0)
        if level:
            label.alignment = Alignment(indent=level)
        for col_idx, number_format in enumerate(sheet.column_formats, 1):
            cell = ws.cell(row=row, column=col_idx)
            if number_format and cell.value is not None:
                cell.number_format = number_format

    if rated:
        column = get_column_letter(rated[0])
        target = f"{column}2:{column}{len(sheet.rows) + 1}"
        for label, color in TREND_COLORS.items():
            ws.conditional_formatting.add(
                target,
                CellIsRule(operator="equal", formula=[f'"{label}"'], font=Font(color=color, bold=True)),
            )
    ws.freeze_panes = "A2"


def _row_of(sheet: ReportSheet, key: str) -> int:
    return sheet.keys.index(key) + 2


def _add_ratio_charts(ws: Worksheet, ratios: ReportSheet, balance: ReportSheet, t: Translator) -> None:
    label_col, value_col = CHART_LABEL_COLUMN, CHART_VALUE_COLUMN
    ws.cell(row=1, column=label_col, value=t("accounting.description"))
    ws.cell(row=1, column=value_col, value=t("accounting.amount"))

    balance_title = balance.title.replace("'", "''")
    row = 2
    blocks: Dict[str, tuple] = {}
    for name, keys in (("radar", RADAR_KEYS), ("bar", BAR_KEYS), ("doughnut", DOUGHNUT_KEYS)):
        start = row
        for key in keys:
            ws.cell(row=row, column=label_col, value=t(f"accounting.{key}"))
            if name == "doughnut":
                source = f"='{balance_title}'!B{_row_of(balance, key)}"
            else:
                source = f"=B{_row_of(ratios, key)}"
            ws.cell(row=row, column=value_col, value=source).number_format = "0.00"
            row += 1
        blocks[name] = (start, row - 1)
    ws.column_dimensions[get_column_letter(label_col)].width = 25

    def refs(name: str):
        first, last = blocks[name]
        data = Reference(ws, min_col=value_col, min_row=first, max_row=last)
        labels = Reference(ws, min_col=label_col, min_row=first, max_row=last)
        return data, labels

    radar = RadarChart()
    radar.type = "marker"
    radar.title = t("accounting.financialHealth")
    radar.style = 26
    data, labels = refs("radar")
    radar.add_data(data, titles_from_data=False)
    radar.set_categories(labels)
    ws.add_chart(radar, "K2")

    bar = BarChart()
    bar.type = "col"
    bar.title = t("accounting.efficiencyMetrics")
    bar.legend = None
    data, labels = refs("bar")
    bar.add_data(data, titles_from_data=False)
    bar.set_categories(labels)
    ws.add_chart(bar, "K18")

    doughnut = DoughnutChart()
    doughnut.title = t("accounting.capitalStructure")
    data, labels = refs("doughnut")
    doughnut.add_data(data, titles_from_data=False)
    doughnut.set_categories(labels)
    ws.add_chart(doughnut, "K34")


def build_financial_workbook(sheets: List[ReportSheet], t: Translator) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    by_name = {sheet.name: sheet for sheet in sheets}

    for sheet in sheets:
        ws = wb.create_sheet(title=safe_sheet_title(sheet.title))
        _write_header(ws, sheet.headers)
        for row_idx, values in enumerate(sheet.rows, 2):
            for col_idx, value in enumerate(values, 1):
                if value is not None:
                    ws.cell(row=row_idx, column=col_idx, value=value)
        _format_report_sheet(ws, sheet)

        if sheet.name == "financialRatios" and "balanceSheet" in by_name:
            _add_ratio_charts(ws, sheet, by_name["balanceSheet"], t)

    return _save(wb)
