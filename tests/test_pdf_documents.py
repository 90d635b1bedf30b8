from finerp.core.i18n import get_translator
from finerp.core.pdf import PDFGenerationError, render_bill_pdf, render_invoice_pdf
from finerp.schemas.bill import Bill
from finerp.schemas.invoice import Invoice
from finerp.schemas.tenant_settings import TenantSettings
from datetime import datetime, timezone
from unittest.mock import patch
import pytest

NOW = datetime.now(timezone.utc)

INVOICE = Invoice(
    id="inv123", tenant_id="t1", created_at=NOW, customer_name="Himal <Traders> & Co", date="2024-05-15",
    items=[{"description": "Rice", "quantity": 2, "rate": 2500, "amount": 5000}],
    total_amount=5000,
)

BILL = Bill(
    id="bill123", bill_no="BILL-BILL123", tenant_id="t1", created_at=NOW, vendor="Nepal Supplies", date="2024-06-02",
    items=[{"description": "Paper", "quantity": 10, "rate": 500, "vat_rate": 13, "amount": 5000, "vat_amount": 650}],
    total=5000, total_vat=650,
)

def test_invoice_pdf_with_company_header():
    company = TenantSettings(company_name="Sagarmatha Pvt. Ltd.", pan_number="301234567", address="Kathmandu")
    pdf = render_invoice_pdf(INVOICE, get_translator("en"), company)
    assert pdf.startswith(b"%PDF")

def test_bill_pdf():
    pdf = render_bill_pdf(BILL, get_translator("en"))
    assert pdf.startswith(b"%PDF")

def test_pdf_build_failure_is_wrapped():
    with patch("finerp.core.pdf.SimpleDocTemplate.build", side_effect=ValueError("layout")):
        with pytest.raises(PDFGenerationError):
            render_bill_pdf(BILL, get_translator("en"))
