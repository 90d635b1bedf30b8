from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging

from finerp.api.deps import current_translator, store_unavailable
from finerp.api.downloads import pdf_attachment, xlsx_attachment
from finerp.core.excel import generate_excel
from finerp.core.i18n import Translator
from finerp.core.pdf import PDFGenerationError, render_invoice_pdf
from finerp.core.periods import today_iso
from finerp.core.sales import create_invoice, get_invoice, invoice_export_rows, list_invoices, set_invoice_status
from finerp.core.tenancy import current_tenant
from finerp.core.tenant_settings import get_tenant_settings
from finerp.db.session import get_store
from finerp.db.store import DocumentStore, StoreError
from finerp.schemas.common import StatusUpdate
from finerp.schemas.invoice import Invoice, InvoiceCreate

router = APIRouter(prefix="/invoices", tags=["sales"])
logger = logging.getLogger(__name__)

INVOICE_NOT_FOUND = "Invoice not found"


@router.post("", response_model=Invoice, status_code=201)
def add_invoice(
    payload: InvoiceCreate,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return create_invoice(store, tenant_id, payload)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


@router.get("", response_model=List[Invoice])
def get_invoices(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return list_invoices(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


# Declared before /{invoice_id} so "export" is not read as an id
@router.get("/export")
def export_invoices(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    t: Translator = Depends(current_translator),
):
    try:
        invoices = list_invoices(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)

    logger.info(f"Sales export for tenant: {tenant_id}, {len(invoices)} invoices")
    headers = [t("sales.invoiceNo"), t("sales.customer"), t("sales.date"), t("sales.total"), t("sales.status")]
    content = generate_excel(t("sales.title"), headers, invoice_export_rows(invoices, t))
    return xlsx_attachment(content, f"sales-invoices-{today_iso()}.xlsx")


@router.get("/{invoice_id}", response_model=Invoice)
def read_invoice(
    invoice_id: str,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        invoice = get_invoice(store, tenant_id, invoice_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail=INVOICE_NOT_FOUND)
    return invoice


@router.patch("/{invoice_id}/status", response_model=Invoice)
def update_invoice_status(
    invoice_id: str,
    payload: StatusUpdate,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        invoice = set_invoice_status(store, tenant_id, invoice_id, payload.status)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail=INVOICE_NOT_FOUND)
    return invoice


@router.get("/{invoice_id}/pdf")
def download_invoice_pdf(
    invoice_id: str,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    t: Translator = Depends(current_translator),
):
    logger.info(f"Invoice PDF requested for tenant: {tenant_id}, invoice: {invoice_id}")
    try:
        invoice = get_invoice(store, tenant_id, invoice_id)
        company = get_tenant_settings(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail=INVOICE_NOT_FOUND)

    try:
        pdf_bytes = render_invoice_pdf(invoice, t, company)
    except PDFGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return pdf_attachment(pdf_bytes, f"invoice-{invoice.id}.pdf")
