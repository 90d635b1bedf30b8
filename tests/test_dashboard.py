from fastapi.testclient import TestClient
from finerp.main import app
from finerp.core.dashboard import build_dashboard, expense_breakdown, next_vat_filing_date
from finerp.core.i18n import get_translator
from finerp.schemas.bill import Bill
from finerp.schemas.invoice import Invoice
from datetime import date, datetime, timezone
import uuid

client = TestClient(app)
t = get_translator("en")
NOW = datetime.now(timezone.utc)

def make_invoice(day, total, status="draft"):
    return Invoice(
        id=uuid.uuid4().hex, tenant_id="t1", created_at=NOW, customer_name="C", date=day,
        items=[{"description": "x", "quantity": 1, "rate": total, "amount": total}],
        total_amount=total, status=status,
    )

def make_bill(day, vendor, total, vat):
    return Bill(
        id=uuid.uuid4().hex, bill_no="BILL-X", tenant_id="t1", created_at=NOW, vendor=vendor, date=day,
        items=[{"description": "x", "quantity": 1, "rate": total}],
        total=total, total_vat=vat,
    )

def test_next_vat_filing_date():
    assert next_vat_filing_date(date(2024, 3, 10)) == date(2024, 3, 25)
    assert next_vat_filing_date(date(2024, 3, 25)) == date(2024, 3, 25)
    assert next_vat_filing_date(date(2024, 3, 26)) == date(2024, 4, 25)
    assert next_vat_filing_date(date(2024, 12, 31)) == date(2025, 1, 25)

def test_expense_breakdown_groups_small_vendors():
    bills = [make_bill("2024-06-01", f"V{i}", 100 * (i + 1), 0) for i in range(6)]
    slices = expense_breakdown(bills, "Other")
    assert [s.name for s in slices] == ["V5", "V4", "V3", "V2", "Other"]
    assert slices[-1].value == 300

def test_build_dashboard():
    invoices = [
        make_invoice("2024-06-03", 1000, "paid"),
        make_invoice("2024-05-20", 500, "unpaid"),
        make_invoice("2023-11-01", 999),
    ]
    bills = [make_bill("2024-06-05", "Nepal Supplies", 200, 26)]

    dashboard = build_dashboard(invoices, bills, t, today=date(2024, 6, 10))
    assert dashboard.stats.total_sales == 2499
    assert dashboard.stats.receivables == 1499
    assert dashboard.stats.total_purchases == 200
    assert dashboard.stats.vat_on_purchases == 26

    assert [p.month for p in dashboard.monthly] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
    assert dashboard.monthly[-1].income == 1000
    assert dashboard.monthly[-1].expenses == 226
    assert dashboard.monthly[-2].income == 500

    keys = [r.key for r in dashboard.reminders]
    assert keys == ["vatFilingDue", "invoiceReminder", "irdSync"]
    assert dashboard.reminders[0].due_date == "2024-06-25"

def test_dashboard_endpoint():
    tenant_id = f"dash-{uuid.uuid4().hex[:8]}"
    headers = {"X-Tenant-ID": tenant_id}
    client.post("/api/invoices", json={
        "customerName": "Himal Traders", "date": date.today().isoformat(),
        "items": [{"description": "Rice", "quantity": 4, "rate": 250}],
    }, headers=headers)

    response = client.get("/api/dashboard", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["totalSales"] == 1000
    assert data["stats"]["receivables"] == 1000
    assert len(data["monthly"]) == 6
    assert data["monthly"][-1]["income"] == 1000
    assert data["expenseBreakdown"] == []

if __name__ == "__main__":
    test_build_dashboard()
