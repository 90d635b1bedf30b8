from fastapi.testclient import TestClient
from finerp.main import app
from finerp.core.audit import audit_repo
from finerp.core.sales import calculate_amount
from openpyxl import load_workbook
from datetime import date
import io
import uuid

client = TestClient(app)

def new_tenant():
    return f"sales-{uuid.uuid4().hex[:8]}"

def create_invoice(tenant_id, **fields):
    payload = {
        "customerName": "Himal Traders",
        "date": "2024-05-15",
        "items": [
            {"description": "Rice 25kg", "quantity": 2, "rate": 2500, "amount": 1},
            {"description": "Delivery", "quantity": 1, "rate": 300},
        ],
    }
    payload.update(fields)
    return client.post("/api/invoices", json=payload, headers={"X-Tenant-ID": tenant_id})

def test_calculate_amount():
    assert calculate_amount(3, 33.5) == 100.5
    assert calculate_amount(0, 500) == 0

def test_create_invoice_computes_amounts():
    tenant_id = new_tenant()
    response = create_invoice(tenant_id)
    assert response.status_code == 201

    data = response.json()
    assert data["status"] == "draft"
    assert data["tenantId"] == tenant_id
    # Client-supplied amount is ignored
    assert data["items"][0]["amount"] == 5000
    assert data["items"][1]["amount"] == 300
    assert data["totalAmount"] == 5300

def test_invoice_item_defaults():
    response = create_invoice(new_tenant(), items=[{"description": "Consulting", "rate": 1200}])
    assert response.status_code == 201
    item = response.json()["items"][0]
    assert item["quantity"] == 1
    assert item["amount"] == 1200

def test_invoice_validation():
    tenant_id = new_tenant()
    assert create_invoice(tenant_id, items=[]).status_code == 422
    assert create_invoice(tenant_id, customerName="").status_code == 422
    assert create_invoice(tenant_id, items=[{"description": "x", "quantity": -1, "rate": 10}]).status_code == 422

def test_invoice_is_hidden_from_other_tenants():
    owner, other = new_tenant(), new_tenant()
    invoice_id = create_invoice(owner).json()["id"]

    assert client.get(f"/api/invoices/{invoice_id}", headers={"X-Tenant-ID": owner}).status_code == 200
    assert client.get(f"/api/invoices/{invoice_id}", headers={"X-Tenant-ID": other}).status_code == 404
    assert client.get(f"/api/invoices/{invoice_id}/pdf", headers={"X-Tenant-ID": other}).status_code == 404
    response = client.patch(f"/api/invoices/{invoice_id}/status", json={"status": "paid"}, headers={"X-Tenant-ID": other})
    assert response.status_code == 404
    assert client.get("/api/invoices", headers={"X-Tenant-ID": other}).json() == []

def test_update_invoice_status():
    tenant_id = new_tenant()
    invoice_id = create_invoice(tenant_id).json()["id"]

    response = client.patch(f"/api/invoices/{invoice_id}/status", json={"status": "paid"}, headers={"X-Tenant-ID": tenant_id})
    assert response.status_code == 200
    assert response.json()["status"] == "paid"

    response = client.patch(f"/api/invoices/{invoice_id}/status", json={"status": "cancelled"}, headers={"X-Tenant-ID": tenant_id})
    assert response.status_code == 422

def test_invoice_pdf_download():
    tenant_id = new_tenant()
    invoice_id = create_invoice(tenant_id).json()["id"]

    response = client.get(f"/api/invoices/{invoice_id}/pdf", headers={"X-Tenant-ID": tenant_id})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"invoice-{invoice_id}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")

    pdf_log = next(l for l in reversed(audit_repo.get_all()) if l.endpoint == f"/api/invoices/{invoice_id}/pdf")
    assert pdf_log.action_type == "PDF_DOWNLOAD"
    assert pdf_log.tenant_id == tenant_id

def test_sales_export():
    tenant_id = new_tenant()
    first = create_invoice(tenant_id).json()
    create_invoice(tenant_id, customerName="Everest Mart", date="2024-05-20")
    client.patch(f"/api/invoices/{first['id']}/status", json={"status": "unpaid"}, headers={"X-Tenant-ID": tenant_id})

    response = client.get("/api/invoices/export", headers={"X-Tenant-ID": tenant_id})
    assert response.status_code == 200
    assert f"sales-invoices-{date.today().isoformat()}.xlsx" in response.headers["content-disposition"]

    ws = load_workbook(io.BytesIO(response.content)).active
    assert [c.value for c in ws[1]] == ["Invoice No", "Customer", "Date", "Total", "Status"]
    rows = [[c.value for c in row] for row in ws.iter_rows(min_row=2)]
    assert rows == [
        [first["id"], "Himal Traders", "2024-05-15", "5300.00", "Unpaid"],
        [rows[1][0], "Everest Mart", "2024-05-20", "5300.00", "Draft"],
    ]

if __name__ == "__main__":
    test_create_invoice_computes_amounts()
    test_invoice_pdf_download()
