from fastapi.testclient import TestClient
from finerp.main import app
from openpyxl import load_workbook
from datetime import date, timedelta
import io
import uuid

client = TestClient(app)

def new_tenant():
    return f"ledger-{uuid.uuid4().hex[:8]}"

def post_entry(tenant_id, **fields):
    payload = {"date": "2024-03-10", "account": "Cash", "description": "Opening balance", "debit": 1000, "credit": 0}
    payload.update(fields)
    return client.post("/api/ledger-entries", json=payload, headers={"X-Tenant-ID": tenant_id})

def test_create_ledger_entry():
    tenant_id = new_tenant()
    response = post_entry(tenant_id)
    assert response.status_code == 201

    data = response.json()
    assert data["id"]
    assert data["tenantId"] == tenant_id
    assert data["account"] == "Cash"
    assert data["debit"] == 1000
    assert data["credit"] == 0
    assert "createdAt" in data

def test_ledger_defaults_and_snake_case_input():
    tenant_id = new_tenant()
    response = client.post(
        "/api/ledger-entries",
        json={"date": "2024-03-11", "account": "Sales"},
        headers={"X-Tenant-ID": tenant_id},
    )
    assert response.status_code == 201
    assert response.json()["debit"] == 0
    assert response.json()["credit"] == 0

def test_list_is_tenant_scoped_and_ordered_by_date():
    tenant_a, tenant_b = new_tenant(), new_tenant()
    post_entry(tenant_a, date="2024-03-12", account="Bank")
    post_entry(tenant_a, date="2024-03-01", account="Cash")
    post_entry(tenant_b, date="2024-03-05", account="Rent")

    response = client.get("/api/ledger-entries", headers={"X-Tenant-ID": tenant_a})
    assert response.status_code == 200
    entries = response.json()
    assert [e["account"] for e in entries] == ["Cash", "Bank"]
    assert all(e["tenantId"] == tenant_a for e in entries)

def test_ledger_validation():
    tenant_id = new_tenant()
    assert post_entry(tenant_id, date="10/03/2024").status_code == 422
    assert post_entry(tenant_id, debit=-5).status_code == 422
    assert post_entry(tenant_id, account="").status_code == 422

def test_ledger_export_filters_inclusive_range():
    tenant_id = new_tenant()
    post_entry(tenant_id, date="2024-01-31", account="Before")
    post_entry(tenant_id, date="2024-02-01", account="First day", debit=250.5)
    post_entry(tenant_id, date="2024-02-29", account="Last day", debit=0, credit=75)
    post_entry(tenant_id, date="2024-03-01", account="After")

    response = client.get(
        "/api/ledger-entries/export?from=2024-02-01&to=2024-02-29",
        headers={"X-Tenant-ID": tenant_id},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    assert "ledger-entries-2024-02-01-to-2024-02-29.xlsx" in response.headers["content-disposition"]

    ws = load_workbook(io.BytesIO(response.content)).active
    assert ws.title == "Ledger"
    assert [c.value for c in ws[1]] == ["Date", "Account", "Description", "Debit", "Credit"]
    rows = [[c.value for c in row] for row in ws.iter_rows(min_row=2)]
    assert rows == [
        ["2024-02-01", "First day", "Opening balance", "250.50", "0.00"],
        ["2024-02-29", "Last day", "Opening balance", "0.00", "75.00"],
    ]
    assert ws["A1"].font.bold

def test_ledger_export_translated_headers():
    tenant_id = new_tenant()
    post_entry(tenant_id, date="2024-02-01")
    response = client.get(
        "/api/ledger-entries/export?from=2024-02-01&to=2024-02-01&lang=ne",
        headers={"X-Tenant-ID": tenant_id},
    )
    ws = load_workbook(io.BytesIO(response.content)).active
    assert ws.title == "खाता"
    assert ws["A1"].value == "मिति"

def test_ledger_export_rejects_bad_dates():
    response = client.get(
        "/api/ledger-entries/export?from=2024-13-45&to=2024-02-01",
        headers={"X-Tenant-ID": new_tenant()},
    )
    assert response.status_code == 422

if __name__ == "__main__":
    test_create_ledger_entry()
    test_ledger_export_filters_inclusive_range()

def test_ledger_export_defaults_to_today():
    tenant_id = new_tenant()
    today = date.today()
    post_entry(tenant_id, date=today.isoformat(), account="Today")
    post_entry(tenant_id, date=(today - timedelta(days=1)).isoformat(), account="Yesterday")

    response = client.get("/api/ledger-entries/export", headers={"X-Tenant-ID": tenant_id})
    assert response.status_code == 200
    assert response.headers["content-disposition"] == (
        f'attachment; filename="ledger-entries-{today.isoformat()}-to-{today.isoformat()}.xlsx"')

    ws = load_workbook(io.BytesIO(response.content)).active
    assert [row[1].value for row in ws.iter_rows(min_row=2)] == ["Today"]
