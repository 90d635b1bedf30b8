from datetime import datetime, timezone
from typing import List
import logging

from finerp.db.store import DocumentStore, LEDGER_ENTRIES
from finerp.schemas.ledger import LedgerEntry, LedgerEntryCreate
from finerp.core.periods import sort_by_date

logger = logging.getLogger(__name__)


def create_ledger_entry(store: DocumentStore, tenant_id: str, payload: LedgerEntryCreate) -> LedgerEntry:
    document = {
        **payload.to_document(),
        "tenantId": tenant_id,
        "createdAt": datetime.now(timezone.utc),
    }
    doc_id = store.add(LEDGER_ENTRIES, document)
    logger.info(f"Ledger entry {doc_id} created for tenant: {tenant_id}")
    return LedgerEntry(id=doc_id, **document)


def list_ledger_entries(store: DocumentStore, tenant_id: str) -> List[LedgerEntry]:
    docs = store.where(LEDGER_ENTRIES, "tenantId", tenant_id)
    return sort_by_date(LedgerEntry(**doc) for doc in docs)


def ledger_export_rows(entries: List[LedgerEntry]) -> List[list]:
    return [
        [e.date, e.account, e.description, f"{e.debit:.2f}", f"{e.credit:.2f}"]
        for e in entries
    ]
