"""
Financial statement templates for the reports workbook.

The statements are fixed sample figures. Ratio, trend and benchmark rows are
spreadsheet formulas that point at the statement rows, so the workbook
recalculates when a user edits any figure in Excel.

Layout happens in two passes: every sheet is laid out first so that each
line knows its row, then formulas are resolved against those positions.
That lets a sheet reference a sheet that appears later in the workbook.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from finerp.core.excel import safe_sheet_title
from finerp.core.i18n import Translator
from finerp.schemas.report import ReportSheet

AMOUNT_FORMAT = "#,##0.00"
RATIO_FORMAT = "0.00"
PERCENT_FORMAT = "0.0%"

# Row 1 is the header row
FIRST_DATA_ROW = 2


class Refs:
    """Cell addresses of template lines, keyed by (sheet, line key)."""

    def __init__(self, titles: Dict[str, str], rows: Dict[Tuple[str, str], int]):
        self._titles = titles
        self._rows = rows

    def row(self, sheet: str, key: str) -> int:
        return self._rows[(sheet, key)]

    def cell(self, sheet: str, key: str, column: str = "B", current: Optional[str] = None) -> str:
        address = f"{column}{self.row(sheet, key)}"
        if sheet == current:
            return address
        title = self._titles[sheet].replace("'", "''")
        return f"'{title}'!{address}"


Value = Union[None, float, str, Callable[[Refs, int], str]]


@dataclass
class Line:
    key: str
    level: int = 0
    values: Sequence[Value] = ()


@dataclass
class SheetTemplate:
    name: str
    title_key: str
    header_keys: List[str]
    lines: List[Line]
    column_formats: List[Optional[str]] = field(default_factory=list)


def _fmt(threshold: float) -> str:
    return f"{threshold:g}"


def tiered_if(cell: str, tiers: Sequence[Tuple[float, str]], default: str, op: str = ">") -> str:
    """Nested IF: the first tier whose threshold the cell passes wins."""
    formula = f'"{default}"'
    for threshold, label in reversed(tiers):
        formula = f'IF({cell}{op}{_fmt(threshold)},"{label}",{formula})'
    return f"={formula}"


@dataclass(frozen=True)
class Rating:
    """Thresholds with a short grade and a longer analysis sentence per tier."""
    tiers: Tuple[Tuple[float, str, str], ...]
    default: Tuple[str, str]
    op: str = ">"

    def grade(self, cell: str) -> str:
        return tiered_if(cell, [(t, g) for t, g, _ in self.tiers], self.default[0], self.op)

    def analysis(self, cell: str) -> str:
        return tiered_if(cell, [(t, a) for t, _, a in self.tiers], self.default[1], self.op)


def rated_line(key: str, level: int, amount: Callable[[Refs, int], str], rating: Rating) -> Line:
    return Line(key, level, (
        amount,
        lambda refs, row: rating.grade(f"B{row}"),
        lambda refs, row: rating.analysis(f"B{row}"),
    ))


def ref(sheet: str, key: str, current: str) -> Callable[[Refs, int], str]:
    return lambda refs, row: f"={refs.cell(sheet, key, current=current)}"


def _sum_rows(sheet: str, first: str, last: str) -> Callable[[Refs, int], str]:
    return lambda refs, row: f"=SUM(B{refs.row(sheet, first)}:B{refs.row(sheet, last)})"


# -- Statements ---------------------------------------------------------------

TRIAL_BALANCE = "trialBalance"
PROFIT_AND_LOSS = "profitAndLoss"
BALANCE_SHEET = "balanceSheet"
CASH_FLOW = "cashFlow"
MARKET_DATA = "marketData"
TREND_ANALYSIS = "trendAnalysis"
INDUSTRY_ANALYSIS = "industryAnalysis"
FINANCIAL_RATIOS = "financialRatios"


def _trial_balance() -> SheetTemplate:
    lines = [
        Line("assets"),
        Line("cash", 1, (10000, 0)),
        Line("accountsReceivable", 1, (5000, 0)),
        Line("inventory", 1, (8000, 0)),
        Line("liabilities"),
        Line("accountsPayable", 1, (0, 3000)),
        Line("loans", 1, (0, 5000)),
        Line("equity"),
        Line("capital", 1, (0, 12000)),
        Line("retainedEarnings", 1, (0, 3000)),
    ]
    last = FIRST_DATA_ROW + len(lines) - 1
    lines.append(Line("total", 0, (
        f"=SUM(B{FIRST_DATA_ROW}:B{last})",
        f"=SUM(C{FIRST_DATA_ROW}:C{last})",
    )))
    return SheetTemplate(
        TRIAL_BALANCE, "accounting.trialBalance",
        ["accounting.account", "accounting.debit", "accounting.credit"],
        lines, [None, AMOUNT_FORMAT, AMOUNT_FORMAT],
    )


def _profit_and_loss() -> SheetTemplate:
    s = PROFIT_AND_LOSS

    def operating_income(refs: Refs, row: int) -> str:
        return "=B{}-B{}-B{}".format(
            refs.row(s, "sales"), refs.row(s, "costOfGoodsSold"), refs.row(s, "operatingExpenses"))

    def net_profit(refs: Refs, row: int) -> str:
        return "=B{}+B{}-B{}".format(
            refs.row(s, "operatingIncome"), refs.row(s, "otherIncome"), refs.row(s, "interestExpense"))

    return SheetTemplate(
        s, "accounting.profitAndLoss",
        ["accounting.description", "accounting.amount"],
        [
            Line("revenue"),
            Line("sales", 1, (50000,)),
            Line("otherIncome", 1, (2000,)),
            Line("expenses"),
            Line("costOfGoodsSold", 1, (25000,)),
            Line("operatingExpenses", 1, (5000,)),
            Line("interestExpense", 1, (2000,)),
            Line("operatingIncome", 0, (operating_income,)),
            Line("profit", 0, (net_profit,)),
        ],
        [None, AMOUNT_FORMAT],
    )


def _balance_sheet() -> SheetTemplate:
    s = BALANCE_SHEET

    def total_of(*keys: str) -> Callable[[Refs, int], str]:
        return lambda refs, row: "=" + "+".join(f"B{refs.row(s, k)}" for k in keys)

    return SheetTemplate(
        s, "accounting.balanceSheet",
        ["accounting.description", "accounting.amount"],
        [
            Line("assets"),
            Line("currentAssets", 1, (_sum_rows(s, "cash", "inventory"),)),
            Line("cash", 2, (10000,)),
            Line("accountsReceivable", 2, (5000,)),
            Line("inventory", 2, (8000,)),
            Line("fixedAssets", 1, (_sum_rows(s, "equipment", "equipment"),)),
            Line("equipment", 2, (10000,)),
            Line("totalAssets", 0, (total_of("currentAssets", "fixedAssets"),)),
            Line("liabilities"),
            Line("currentLiabilities", 1, (_sum_rows(s, "accountsPayable", "shortTermLoans"),)),
            Line("accountsPayable", 2, (3000,)),
            Line("shortTermLoans", 2, (2000,)),
            Line("longTermLiabilities", 1, (_sum_rows(s, "longTermLoans", "longTermLoans"),)),
            Line("longTermLoans", 2, (3000,)),
            Line("totalLiabilities", 0, (total_of("currentLiabilities", "longTermLiabilities"),)),
            Line("equity"),
            Line("capital", 1, (12000,)),
            Line("retainedEarnings", 1, (3000,)),
            Line("totalEquity", 0, (total_of("capital", "retainedEarnings"),)),
        ],
        [None, AMOUNT_FORMAT],
    )


def _cash_flow() -> SheetTemplate:
    s = CASH_FLOW
    return SheetTemplate(
        s, "accounting.cashFlow",
        ["accounting.description", "accounting.amount"],
        [
            Line("operatingActivities"),
            Line("netIncome", 1, (ref(PROFIT_AND_LOSS, "profit", s),)),
            Line("depreciation", 1, (1000,)),
            Line("changesInWorkingCapital", 1, (-6000,)),
            Line("investingActivities"),
            Line("purchaseOfEquipment", 1, (-5000,)),
            Line("financingActivities"),
            Line("loanProceeds", 1, (5000,)),
            Line("loanRepayments", 1, (-3000,)),
            Line("netCashFlow", 0, (_sum_rows(s, "netIncome", "loanRepayments"),)),
        ],
        [None, AMOUNT_FORMAT],
    )


def _market_data() -> SheetTemplate:
    return SheetTemplate(
        MARKET_DATA, "accounting.marketData",
        ["accounting.description", "accounting.amount"],
        [
            Line("sharesOutstanding", 0, (1000,)),
            Line("stockPrice", 0, (250,)),
        ],
        [None, AMOUNT_FORMAT],
    )


TREND_RATING = Rating(
    tiers=(
        (0.1, "Strong Growth", "Significant improvement over the previous period"),
        (0, "Growth", "Moderate improvement over the previous period"),
        (-0.1, "Decline", "Slight deterioration from the previous period"),
    ),
    default=("Strong Decline", "Significant deterioration from the previous period"),
)


def _trend_analysis() -> SheetTemplate:
    s = TREND_ANALYSIS
    # (line key, source sheet, previous period figure)
    tracked = [
        ("sales", PROFIT_AND_LOSS, 45000),
        ("otherIncome", PROFIT_AND_LOSS, 1500),
        ("costOfGoodsSold", PROFIT_AND_LOSS, 24000),
        ("operatingExpenses", PROFIT_AND_LOSS, 5500),
        ("profit", PROFIT_AND_LOSS, 15000),
        ("totalAssets", BALANCE_SHEET, 30000),
        ("totalLiabilities", BALANCE_SHEET, 9000),
        ("totalEquity", BALANCE_SHEET, 13000),
        ("netCashFlow", CASH_FLOW, 8000),
    ]
    lines = []
    for key, source, previous in tracked:
        lines.append(Line(key, 0, (
            ref(source, key, s),
            previous,
            lambda refs, row: f"=IF(C{row}=0,0,(B{row}-C{row})/ABS(C{row}))",
            lambda refs, row: TREND_RATING.grade(f"D{row}"),
            lambda refs, row: TREND_RATING.analysis(f"D{row}"),
        )))
    return SheetTemplate(
        s, "accounting.trendAnalysis",
        ["accounting.description", "accounting.currentPeriod", "accounting.previousPeriod",
         "accounting.change", "accounting.trend", "accounting.analysis"],
        lines,
        [None, AMOUNT_FORMAT, AMOUNT_FORMAT, PERCENT_FORMAT, None, None],
    )


INDUSTRY_BENCHMARKS: Dict[str, Dict[str, Dict[str, float]]] = {
    "retail": {
        "currentRatio": {"excellent": 2.0, "good": 1.5, "fair": 1.0},
        "quickRatio": {"excellent": 1.0, "good": 0.8, "fair": 0.5},
        "grossMargin": {"excellent": 0.4, "good": 0.3, "fair": 0.2},
        "inventoryTurnover": {"excellent": 8, "good": 6, "fair": 4},
    },
    "manufacturing": {
        "currentRatio": {"excellent": 2.5, "good": 2.0, "fair": 1.5},
        "quickRatio": {"excellent": 1.5, "good": 1.0, "fair": 0.7},
        "grossMargin": {"excellent": 0.35, "good": 0.25, "fair": 0.15},
        "inventoryTurnover": {"excellent": 6, "good": 4, "fair": 2},
    },
    "service": {
        "currentRatio": {"excellent": 1.5, "good": 1.2, "fair": 1.0},
        "quickRatio": {"excellent": 1.2, "good": 1.0, "fair": 0.8},
        "grossMargin": {"excellent": 0.5, "good": 0.4, "fair": 0.3},
        "assetTurnover": {"excellent": 2.0, "good": 1.5, "fair": 1.0},
    },
}

# Benchmark metric -> line on the ratios sheet
BENCHMARK_SOURCES = {
    "currentRatio": "currentRatio",
    "quickRatio": "quickRatio",
    "grossMargin": "grossProfitMargin",
    "inventoryTurnover": "inventoryTurnover",
    "assetTurnover": "assetTurnover",
}


def benchmark_rating(thresholds: Dict[str, float]) -> Rating:
    return Rating(
        tiers=(
            (thresholds["excellent"], "Excellent", "Above industry average"),
            (thresholds["good"], "Good", "Industry average"),
            (thresholds["fair"], "Fair", "Below industry average"),
        ),
        default=("Poor", "Significantly below industry average"),
    )


def _industry_analysis() -> SheetTemplate:
    s = INDUSTRY_ANALYSIS
    lines = [Line("industryAnalysis")]
    for industry, metrics in INDUSTRY_BENCHMARKS.items():
        lines.append(Line(f"{industry}Industry", 1))
        for metric, thresholds in metrics.items():
            lines.append(rated_line(
                metric, 2,
                ref(FINANCIAL_RATIOS, BENCHMARK_SOURCES[metric], s),
                benchmark_rating(thresholds),
            ))
    return SheetTemplate(
        s, "accounting.industryAnalysis",
        ["accounting.description", "accounting.amount", "accounting.trend", "accounting.analysis"],
        lines,
        [None, RATIO_FORMAT, None, None],
    )


def _ratio(numerator: Sequence[Tuple[str, str]], denominator: Sequence[Tuple[str, str]]) -> Callable[[Refs, int], str]:
    """Build `=(a+b)/(c+d)` from (sheet, key) references."""
    def formula(refs: Refs, row: int) -> str:
        top = "+".join(refs.cell(sheet, key) for sheet, key in numerator)
        bottom = "+".join(refs.cell(sheet, key) for sheet, key in denominator)
        if len(numerator) > 1:
            top = f"({top})"
        if len(denominator) > 1:
            bottom = f"({bottom})"
        return f"={top}/{bottom}"
    return formula


def _financial_ratios() -> SheetTemplate:
    bs, pl, md = BALANCE_SHEET, PROFIT_AND_LOSS, MARKET_DATA

    def gross_margin(refs: Refs, row: int) -> str:
        sales = refs.cell(pl, "sales")
        return f"=({sales}-{refs.cell(pl, 'costOfGoodsSold')})/{sales}"

    def price_to_earnings(refs: Refs, row: int) -> str:
        eps_row = refs.row(FINANCIAL_RATIOS, "earningsPerShare")
        return f"=IF(B{eps_row}=0,0,{refs.cell(md, 'stockPrice')}/B{eps_row})"

    lines = [
        Line("liquidityRatios"),
        rated_line("currentRatio", 1, _ratio([(bs, "currentAssets")], [(bs, "currentLiabilities")]), Rating(
            ((1.5, "Good", "Strong liquidity position"), (1, "Fair", "Adequate liquidity")),
            ("Poor", "Potential liquidity issues"))),
        rated_line("quickRatio", 1, _ratio([(bs, "cash"), (bs, "accountsReceivable")], [(bs, "currentLiabilities")]), Rating(
            ((1, "Good", "Strong immediate liquidity"), (0.5, "Fair", "Adequate immediate liquidity")),
            ("Poor", "Potential immediate liquidity issues"))),
        rated_line("cashRatio", 1, _ratio([(bs, "cash")], [(bs, "currentLiabilities")]), Rating(
            ((0.5, "Good", "Strong cash position"), (0.2, "Fair", "Adequate cash reserves")),
            ("Poor", "Low cash reserves - potential risk"))),
        Line("profitabilityRatios"),
        rated_line("grossProfitMargin", 1, gross_margin, Rating(
            ((0.3, "Excellent", "Strong pricing power and cost control"), (0.2, "Good", "Good profitability"),
             (0.1, "Fair", "Marginal profitability")),
            ("Poor", "Low profitability"))),
        rated_line("operatingMargin", 1, _ratio([(pl, "operatingIncome")], [(pl, "sales")]), Rating(
            ((0.2, "Excellent", "Exceptional operational efficiency"), (0.1, "Good", "Good operational performance"),
             (0.05, "Fair", "Adequate operations")),
            ("Poor", "Inefficient operations"))),
        rated_line("netProfitMargin", 1, _ratio([(pl, "profit")], [(pl, "sales")]), Rating(
            ((0.15, "Excellent", "Exceptional overall profitability"), (0.1, "Good", "Strong overall profitability"),
             (0.05, "Fair", "Adequate profitability")),
            ("Poor", "Low overall profitability"))),
        Line("efficiencyRatios"),
        rated_line("assetTurnover", 1, _ratio([(pl, "sales")], [(bs, "totalAssets")]), Rating(
            ((1.5, "Excellent", "Highly efficient asset utilization"), (1, "Good", "Good asset utilization"),
             (0.5, "Fair", "Adequate asset utilization")),
            ("Poor", "Inefficient asset utilization"))),
        rated_line("inventoryTurnover", 1, _ratio([(pl, "costOfGoodsSold")], [(bs, "inventory")]), Rating(
            ((6, "Excellent", "Highly efficient inventory management"), (4, "Good", "Good inventory turnover"),
             (2, "Fair", "Adequate inventory turnover")),
            ("Poor", "Slow inventory turnover"))),
        rated_line("receivablesTurnover", 1, _ratio([(pl, "sales")], [(bs, "accountsReceivable")]), Rating(
            ((12, "Excellent", "Excellent receivables collection"), (8, "Good", "Good receivables management"),
             (4, "Fair", "Adequate receivables turnover")),
            ("Poor", "Slow receivables collection"))),
        rated_line("payablesTurnover", 1, _ratio([(pl, "costOfGoodsSold")], [(bs, "accountsPayable")]), Rating(
            ((12, "Excellent", "Efficient payables management"), (8, "Good", "Good payables turnover"),
             (4, "Fair", "Adequate payables turnover")),
            ("Poor", "Slow payables turnover"))),
        Line("solvencyRatios"),
        rated_line("debtToEquity", 1, _ratio([(bs, "totalLiabilities")], [(bs, "totalEquity")]), Rating(
            ((1, "Good", "Conservative capital structure"), (2, "Fair", "Moderate leverage")),
            ("Poor", "High leverage - potential risk"), op="<")),
        rated_line("debtRatio", 1, _ratio([(bs, "totalLiabilities")], [(bs, "totalAssets")]), Rating(
            ((0.5, "Good", "Strong financial position"), (0.7, "Fair", "Moderate financial position")),
            ("Poor", "High financial risk"), op="<")),
        rated_line("interestCoverage", 1, _ratio([(pl, "operatingIncome")], [(pl, "interestExpense")]), Rating(
            ((3, "Good", "Strong ability to service debt"), (1.5, "Fair", "Adequate debt service capacity")),
            ("Poor", "Potential debt service issues"))),
        Line("marketRatios"),
        rated_line("earningsPerShare", 1, _ratio([(pl, "profit")], [(md, "sharesOutstanding")]), Rating(
            ((0, "Positive", "Profitable per share"),),
            ("Negative", "Loss per share"))),
        rated_line("priceToEarnings", 1, price_to_earnings, Rating(
            ((15, "Undervalued", "Potential investment opportunity"), (25, "Fairly valued", "Market aligned")),
            ("Overvalued", "Potential overvaluation"), op="<")),
    ]
    return SheetTemplate(
        FINANCIAL_RATIOS, "accounting.financialRatios",
        ["accounting.description", "accounting.amount", "accounting.trend", "accounting.analysis"],
        lines,
        [None, RATIO_FORMAT, None, None],
    )


def report_templates() -> List[SheetTemplate]:
    """Sheets in workbook order."""
    return [
        _trend_analysis(),
        _trial_balance(),
        _profit_and_loss(),
        _balance_sheet(),
        _cash_flow(),
        _industry_analysis(),
        _financial_ratios(),
        _market_data(),
    ]


def build_report_sheets(t: Translator) -> List[ReportSheet]:
    templates = report_templates()
    titles = {tpl.name: safe_sheet_title(t(tpl.title_key)) for tpl in templates}
    rows = {
        (tpl.name, line.key): FIRST_DATA_ROW + index
        for tpl in templates
        for index, line in enumerate(tpl.lines)
    }
    refs = Refs(titles, rows)

    sheets = []
    for tpl in templates:
        width = len(tpl.header_keys)
        body = []
        for index, line in enumerate(tpl.lines):
            row = FIRST_DATA_ROW + index
            values = [v(refs, row) if callable(v) else v for v in line.values]
            values += [None] * (width - 1 - len(values))
            body.append([t(f"accounting.{line.key}")] + values)
        sheets.append(ReportSheet(
            name=tpl.name,
            title=titles[tpl.name],
            headers=[t(key) for key in tpl.header_keys],
            rows=body,
            keys=[line.key for line in tpl.lines],
            levels=[line.level for line in tpl.lines],
            column_formats=tpl.column_formats or [None] * width,
        ))
    return sheets
