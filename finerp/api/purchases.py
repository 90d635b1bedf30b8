from fastapi import APIRouter, Depends, HTTPException
from typing import List
import logging

from finerp.api.deps import current_translator, store_unavailable
from finerp.api.downloads import pdf_attachment, xlsx_attachment
from finerp.core.excel import generate_excel
from finerp.core.i18n import Translator
from finerp.core.pdf import PDFGenerationError, render_bill_pdf
from finerp.core.periods import today_iso
from finerp.core.purchases import bill_export_rows, create_bill, get_bill, list_bills, set_bill_status
from finerp.core.tenancy import current_tenant
from finerp.core.tenant_settings import get_tenant_settings
from finerp.db.session import get_store
from finerp.db.store import DocumentStore, StoreError
from finerp.schemas.common import StatusUpdate
from finerp.schemas.bill import Bill, BillCreate

router = APIRouter(prefix="/bills", tags=["purchases"])
logger = logging.getLogger(__name__)

BILL_NOT_FOUND = "Bill not found"


@router.post("", response_model=Bill, status_code=201)
def add_bill(
    payload: BillCreate,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return create_bill(store, tenant_id, payload)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


@router.get("", response_model=List[Bill])
def get_bills(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return list_bills(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


# Declared before /{bill_id} so "export" is not read as an id
@router.get("/export")
def export_bills(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    t: Translator = Depends(current_translator),
):
    try:
        bills = list_bills(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)

    logger.info(f"Purchases export for tenant: {tenant_id}, {len(bills)} bills")
    headers = [t("purchases.billNo"), t("purchases.vendor"), t("purchases.date"),
               t("purchases.total"), t("purchases.totalVat"), t("purchases.status")]
    content = generate_excel(t("purchases.title"), headers, bill_export_rows(bills, t))
    return xlsx_attachment(content, f"purchase-bills-{today_iso()}.xlsx")


@router.get("/{bill_id}", response_model=Bill)
def read_bill(
    bill_id: str,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        bill = get_bill(store, tenant_id, bill_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
    if bill is None:
        raise HTTPException(status_code=404, detail=BILL_NOT_FOUND)
    return bill


@router.patch("/{bill_id}/status", response_model=Bill)
def update_bill_status(
    bill_id: str,
    payload: StatusUpdate,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        bill = set_bill_status(store, tenant_id, bill_id, payload.status)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
    if bill is None:
        raise HTTPException(status_code=404, detail=BILL_NOT_FOUND)
    return bill


@router.get("/{bill_id}/pdf")
def download_bill_pdf(
    bill_id: str,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    t: Translator = Depends(current_translator),
):
    logger.info(f"Bill PDF requested for tenant: {tenant_id}, bill: {bill_id}")
    try:
        bill = get_bill(store, tenant_id, bill_id)
        company = get_tenant_settings(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
    if bill is None:
        raise HTTPException(status_code=404, detail=BILL_NOT_FOUND)

    try:
        pdf_bytes = render_bill_pdf(bill, t, company)
    except PDFGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return pdf_attachment(pdf_bytes, f"bill-{bill.bill_no}.pdf")
