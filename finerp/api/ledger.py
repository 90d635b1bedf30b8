from fastapi import APIRouter, Depends
from typing import List, Tuple
import logging

from finerp.api.deps import current_translator, date_range, store_unavailable
from finerp.api.downloads import xlsx_attachment
from finerp.core.excel import generate_excel
from finerp.core.i18n import Translator
from finerp.core.ledger import create_ledger_entry, ledger_export_rows, list_ledger_entries
from finerp.core.periods import filter_by_date_range
from finerp.core.tenancy import current_tenant
from finerp.db.session import get_store
from finerp.db.store import DocumentStore, StoreError
from finerp.schemas.ledger import LedgerEntry, LedgerEntryCreate

router = APIRouter(prefix="/ledger-entries", tags=["accounting"])
logger = logging.getLogger(__name__)

LEDGER_COLUMN_WIDTHS = [12, 25, 40, 15, 15]


@router.post("", response_model=LedgerEntry, status_code=201)
def add_ledger_entry(
    payload: LedgerEntryCreate,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return create_ledger_entry(store, tenant_id, payload)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


@router.get("", response_model=List[LedgerEntry])
def get_ledger_entries(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return list_ledger_entries(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


@router.get("/export")
def export_ledger_entries(
    period: Tuple[str, str] = Depends(date_range),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    t: Translator = Depends(current_translator),
):
    date_from, date_to = period
    try:
        entries = filter_by_date_range(list_ledger_entries(store, tenant_id), date_from, date_to)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)

    logger.info(f"Ledger export for tenant: {tenant_id}, {date_from}..{date_to}, {len(entries)} entries")
    headers = [t("accounting.date"), t("accounting.account"), t("accounting.description"),
               t("accounting.debit"), t("accounting.credit")]
    content = generate_excel(t("accounting.ledger"), headers, ledger_export_rows(entries), LEDGER_COLUMN_WIDTHS)
    return xlsx_attachment(content, f"ledger-entries-{date_from}-to-{date_to}.xlsx")
