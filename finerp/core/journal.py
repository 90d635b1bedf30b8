from datetime import datetime, timezone
from typing import List
import logging

from finerp.db.store import DocumentStore, JOURNAL_ENTRIES
from finerp.schemas.journal import JournalEntry, JournalEntryCreate
from finerp.core.periods import sort_by_date

logger = logging.getLogger(__name__)


def _with_totals(doc: dict) -> JournalEntry:
    lines = doc.get("entries", [])
    return JournalEntry(
        **doc,
        totalDebit=round(sum(float(line.get("debit", 0)) for line in lines), 2),
        totalCredit=round(sum(float(line.get("credit", 0)) for line in lines), 2),
    )


def create_journal_entry(store: DocumentStore, tenant_id: str, payload: JournalEntryCreate) -> JournalEntry:
    document = {
        **payload.to_document(),
        "tenantId": tenant_id,
        "createdAt": datetime.now(timezone.utc),
    }
    doc_id = store.add(JOURNAL_ENTRIES, document)
    logger.info(f"Journal entry {doc_id} created for tenant: {tenant_id} ({len(payload.entries)} lines)")
    return _with_totals({"id": doc_id, **document})


def list_journal_entries(store: DocumentStore, tenant_id: str) -> List[JournalEntry]:
    docs = store.where(JOURNAL_ENTRIES, "tenantId", tenant_id)
    return sort_by_date(_with_totals(doc) for doc in docs)


def format_journal_lines(entry: JournalEntry) -> str:
    return "\n".join(
        f"{line.account}: {line.debit:.2f} Dr / {line.credit:.2f} Cr"
        for line in entry.entries
    )


def journal_export_rows(entries: List[JournalEntry]) -> List[list]:
    return [[e.date, e.description, format_journal_lines(e)] for e in entries]
