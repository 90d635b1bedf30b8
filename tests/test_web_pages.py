from fastapi.testclient import TestClient
from finerp.main import app
from finerp.core.config import settings
import uuid

def signed_in_client(organization=None):
    web = TestClient(app)
    organization = organization or f"org-{uuid.uuid4().hex[:8]}"
    response = web.post(
        "/login",
        data={"email": "owner@example.com", "organization": organization},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return web, organization

def test_login_sets_session_cookies():
    web, organization = signed_in_client()
    assert web.cookies.get(settings.TENANT_COOKIE) == organization
    assert web.cookies.get(settings.USER_COOKIE) == "owner@example.com"

def test_login_without_organization_starts_a_new_one():
    web = TestClient(app)
    web.post("/login", data={"email": "new@example.com"}, follow_redirects=False)
    assert web.cookies.get(settings.TENANT_COOKIE)

def test_login_rejects_invalid_email():
    web = TestClient(app)
    response = web.post("/login", data={"email": "not-an-email"}, follow_redirects=False)
    assert response.status_code == 422
    assert web.cookies.get(settings.TENANT_COOKIE) is None

def test_pages_render_for_signed_in_user():
    web, _ = signed_in_client()
    for path, marker in [
        ("/", "Dashboard"),
        ("/sales", "Sales Invoices"),
        ("/purchases", "Purchase Bills"),
        ("/accounting", "Ledger"),
        ("/accounting?tab=journal", "Journal"),
        ("/accounting?tab=reports", "Trial Balance"),
        ("/reports", "Financial Ratios"),
        ("/settings", "Company Name"),
    ]:
        response = web.get(path)
        assert response.status_code == 200, path
        assert marker in response.text, path
        assert "owner@example.com" in response.text

def test_invoice_form_with_repeated_items():
    web, organization = signed_in_client()
    response = web.post("/sales/invoices", data={
        "customer_name": "Himal Traders",
        "date": "2024-05-15",
        "description": ["Rice", "Lentils", ""],
        "quantity": ["2", "3", ""],
        "rate": ["100", "50", ""],
    }, follow_redirects=False)
    assert response.status_code == 303

    invoices = web.get("/api/invoices").json()
    assert len(invoices) == 1
    assert invoices[0]["tenantId"] == organization
    assert invoices[0]["totalAmount"] == 350
    assert [i["description"] for i in invoices[0]["items"]] == ["Rice", "Lentils"]

    status = web.post(f"/sales/invoices/{invoices[0]['id']}/status", data={"status": "paid"}, follow_redirects=False)
    assert status.status_code == 303
    assert web.get(f"/api/invoices/{invoices[0]['id']}").json()["status"] == "paid"

def test_invoice_form_validation_error():
    web, _ = signed_in_client()
    response = web.post("/sales/invoices", data={"customer_name": "", "date": "2024-05-15"})
    assert response.status_code == 422
    assert "at least 1 character" in response.text

def test_bill_form_uses_default_vat_rate():
    web, _ = signed_in_client()
    web.put("/api/settings", json={"companyName": "Acme", "defaultVatRate": 10})
    web.post("/purchases/bills", data={
        "vendor": "Nepal Supplies",
        "date": "2024-06-02",
        "description": ["Paper"],
        "quantity": ["10"],
        "rate": ["100"],
        "vat_rate": [""],
    })
    bill = web.get("/api/bills").json()[0]
    assert bill["items"][0]["vatRate"] == 10
    assert bill["totalVat"] == 100

    page = web.get("/purchases")
    assert bill["billNo"] in page.text

def test_ledger_and_journal_forms():
    web, _ = signed_in_client()
    response = web.post("/accounting/ledger", data={
        "date": "2024-07-01", "account": "Cash", "description": "Float", "debit": "500", "credit": "",
    }, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/accounting?tab=ledger&from=2024-07-01&to=2024-07-01"

    web.post("/accounting/journal", data={
        "date": "2024-07-01",
        "description": "Owner investment",
        "account": ["Cash", "Capital"],
        "debit": ["1000", ""],
        "credit": ["", "1000"],
    })
    journal = web.get("/api/journal-entries").json()
    assert journal[0]["totalDebit"] == journal[0]["totalCredit"] == 1000

    page = web.get("/accounting?tab=ledger&from=2024-07-01&to=2024-07-01")
    assert "Float" in page.text
    assert "/api/ledger-entries/export?from=2024-07-01&to=2024-07-01" in page.text

def test_settings_form_and_language():
    web, _ = signed_in_client()
    response = web.post("/settings", data={
        "company_name": "Sagarmatha Pvt. Ltd.",
        "pan_number": "301234567",
        "address": "Kathmandu",
        "language": "ne",
        "default_vat_rate": "13",
    }, follow_redirects=False)
    assert response.status_code == 303

    assert web.get("/api/settings").json()["companyName"] == "Sagarmatha Pvt. Ltd."
    # Tenant language now drives the pages
    assert "बिक्री बीजक" in web.get("/sales").text

def test_language_toggle():
    web, _ = signed_in_client()
    response = web.get("/lang/ne", follow_redirects=False)
    assert response.status_code == 303
    assert web.cookies.get(settings.LANGUAGE_COOKIE) == "ne"
    assert "खरिद बिल" in web.get("/purchases").text
    assert web.get("/lang/xx").status_code == 400

def test_logout_clears_session():
    web, _ = signed_in_client()
    response = web.get("/logout", follow_redirects=False)
    assert response.status_code == 303
    assert web.get("/sales", follow_redirects=False).headers["location"] == "/login"

def test_untouched_added_item_rows_are_ignored():
    web, _ = signed_in_client()
    web.post("/sales/invoices", data={
        "customer_name": "Himal Traders",
        "date": "2024-05-15",
        "description": ["Rice", ""],
        "quantity": ["2", "1"],
        "rate": ["100", "0"],
    })
    items = web.get("/api/invoices").json()[0]["items"]
    assert len(items) == 1
    assert items[0]["amount"] == 200

    web.post("/purchases/bills", data={
        "vendor": "Nepal Supplies",
        "date": "2024-06-02",
        "description": ["Paper", ""],
        "quantity": ["10", "0"],
        "rate": ["100", "0"],
        "vat_rate": ["13", "13"],
    })
    bill = web.get("/api/bills").json()[0]
    assert [i["description"] for i in bill["items"]] == ["Paper"]

def test_language_toggle_returns_only_to_this_site():
    web, _ = signed_in_client()
    response = web.get("/lang/ne", headers={"referer": "https://evil.example/phish"}, follow_redirects=False)
    assert response.headers["location"] == "/"

    response = web.get("/lang/en", headers={"referer": "//evil.example/phish"}, follow_redirects=False)
    assert response.headers["location"] == "/"

    response = web.get("/lang/ne", headers={"referer": "http://testserver/accounting?tab=journal"}, follow_redirects=False)
    assert response.headers["location"] == "/accounting?tab=journal"
