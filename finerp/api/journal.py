from fastapi import APIRouter, Depends
from typing import List, Tuple
import logging

from finerp.api.deps import current_translator, date_range, store_unavailable
from finerp.api.downloads import xlsx_attachment
from finerp.core.excel import generate_excel
from finerp.core.i18n import Translator
from finerp.core.journal import create_journal_entry, journal_export_rows, list_journal_entries
from finerp.core.periods import filter_by_date_range
from finerp.core.tenancy import current_tenant
from finerp.db.session import get_store
from finerp.db.store import DocumentStore, StoreError
from finerp.schemas.journal import JournalEntry, JournalEntryCreate

router = APIRouter(prefix="/journal-entries", tags=["accounting"])
logger = logging.getLogger(__name__)

JOURNAL_COLUMN_WIDTHS = [12, 40, 50]


@router.post("", response_model=JournalEntry, status_code=201)
def add_journal_entry(
    payload: JournalEntryCreate,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return create_journal_entry(store, tenant_id, payload)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


@router.get("", response_model=List[JournalEntry])
def get_journal_entries(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return list_journal_entries(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


@router.get("/export")
def export_journal_entries(
    period: Tuple[str, str] = Depends(date_range),
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    t: Translator = Depends(current_translator),
):
    date_from, date_to = period
    try:
        entries = filter_by_date_range(list_journal_entries(store, tenant_id), date_from, date_to)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)

    logger.info(f"Journal export for tenant: {tenant_id}, {date_from}..{date_to}, {len(entries)} entries")
    headers = [t("accounting.date"), t("accounting.description"), t("accounting.entries")]
    content = generate_excel(t("accounting.journal"), headers, journal_export_rows(entries), JOURNAL_COLUMN_WIDTHS)
    return xlsx_attachment(content, f"journal-entries-{date_from}-to-{date_to}.xlsx")
