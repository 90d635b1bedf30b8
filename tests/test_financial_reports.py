from fastapi.testclient import TestClient
from finerp.main import app
from finerp.core.excel import safe_sheet_title
from finerp.core.i18n import get_translator
from finerp.core.statements import build_report_sheets, tiered_if
from openpyxl import load_workbook
from datetime import date
import io
import uuid

client = TestClient(app)

EN_TITLES = [
    "Trend Analysis", "Trial Balance", "Profit & Loss", "Balance Sheet",
    "Cash Flow", "Industry Analysis", "Financial Ratios", "Market Data",
]

def new_tenant():
    return f"reports-{uuid.uuid4().hex[:8]}"

def export_workbook(query="from=2024-01-01&to=2024-03-31"):
    response = client.get(f"/api/reports/financial/export?{query}", headers={"X-Tenant-ID": new_tenant()})
    assert response.status_code == 200
    return response, load_workbook(io.BytesIO(response.content))

def row_of(ws, label):
    for row in ws.iter_rows(min_row=2):
        if row[0].value == label:
            return row
    raise AssertionError(f"{label} not found in {ws.title}")

def test_safe_sheet_title():
    assert safe_sheet_title("Profit/Loss: [2024]") == "Profit Loss   2024"
    assert len(safe_sheet_title("x" * 40)) == 31

def test_tiered_if():
    assert tiered_if("B2", [(1.5, "Good"), (1, "Fair")], "Poor") == '=IF(B2>1.5,"Good",IF(B2>1,"Fair","Poor"))'
    assert tiered_if("B3", [(0.5, "Good")], "Poor", op="<") == '=IF(B3<0.5,"Good","Poor")'

def test_report_sheets_layout():
    sheets = build_report_sheets(get_translator("en"))
    assert [s.title for s in sheets] == EN_TITLES
    for sheet in sheets:
        assert len(sheet.rows) == len(sheet.levels) == len(sheet.keys)
        assert all(len(row) == len(sheet.headers) for row in sheet.rows)

    balance = next(s for s in sheets if s.name == "balanceSheet")
    levels = dict(zip(balance.keys, balance.levels))
    assert levels["assets"] == 0
    assert levels["currentAssets"] == 1
    assert levels["cash"] == 2

def test_financial_report_json():
    response = client.get(
        "/api/reports/financial?from=2024-01-01&to=2024-03-31",
        headers={"X-Tenant-ID": new_tenant()},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["dateFrom"] == "2024-01-01"
    assert data["dateTo"] == "2024-03-31"
    assert [s["title"] for s in data["sheets"]] == EN_TITLES
    ratios = next(s for s in data["sheets"] if s["name"] == "financialRatios")
    assert ratios["headers"] == ["Description", "Amount", "Trend", "Analysis"]

def test_financial_workbook_export():
    response, wb = export_workbook()
    assert "financial-reports-2024-01-01-to-2024-03-31.xlsx" in response.headers["content-disposition"]
    assert wb.sheetnames == EN_TITLES

    pl = wb["Profit & Loss"]
    assert row_of(pl, "Sales")[1].value == 50000
    assert row_of(pl, "Operating Income")[1].value == "=B3-B6-B7"
    assert row_of(pl, "Net Profit")[1].value == "=B9+B4-B8"
    assert pl["A2"].font.bold
    assert pl["A3"].alignment.indent == 1
    assert pl.column_dimensions["A"].width == 40

    cash_flow = wb["Cash Flow"]
    assert row_of(cash_flow, "Net Income")[1].value == "='Profit & Loss'!B10"

    ratios = wb["Financial Ratios"]
    current = row_of(ratios, "Current Ratio")
    assert current[1].value == "='Balance Sheet'!B3/'Balance Sheet'!B11"
    assert current[2].value.startswith("=IF(B")
    assert current[1].number_format == "0.00"
    assert len(ratios._charts) == 3

def test_trial_balance_totals():
    _, wb = export_workbook()
    tb = wb["Trial Balance"]
    total = row_of(tb, "Total")
    assert total[1].value == "=SUM(B2:B11)"
    assert total[2].value == "=SUM(C2:C11)"
    debits = sum(r[1].value or 0 for r in tb.iter_rows(min_row=2, max_row=11))
    credits = sum(r[2].value or 0 for r in tb.iter_rows(min_row=2, max_row=11))
    assert debits == credits == 23000

def test_financial_workbook_in_nepali():
    _, wb = export_workbook("from=2024-01-01&to=2024-03-31&lang=ne")
    assert "वासलात" in wb.sheetnames
    assert wb["वासलात"]["A1"].value == "विवरण"

if __name__ == "__main__":
    test_financial_workbook_export()

def test_financial_export_defaults_to_today():
    today = date.today().isoformat()
    response, _ = export_workbook("")
    assert f"financial-reports-{today}-to-{today}.xlsx" in response.headers["content-disposition"]
