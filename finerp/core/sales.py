from datetime import datetime, timezone
from typing import List, Optional
import logging

from finerp.db.store import DocumentStore, INVOICES
from finerp.schemas.common import DocumentStatus
from finerp.schemas.invoice import Invoice, InvoiceCreate, InvoiceItem
from finerp.core.periods import sort_by_date

logger = logging.getLogger(__name__)


def calculate_amount(quantity: float, rate: float) -> float:
    return round(quantity * rate, 2)


def price_items(items: List[InvoiceItem]) -> List[InvoiceItem]:
    """Recompute every line amount; client-sent amounts are ignored."""
    return [
        item.model_copy(update={"amount": calculate_amount(item.quantity, item.rate)})
        for item in items
    ]


def create_invoice(store: DocumentStore, tenant_id: str, payload: InvoiceCreate) -> Invoice:
    items = price_items(payload.items)
    document = {
        "customerName": payload.customer_name,
        "date": payload.date,
        "items": [item.to_document() for item in items],
        "totalAmount": round(sum(item.amount for item in items), 2),
        "status": DocumentStatus.DRAFT.value,
        "tenantId": tenant_id,
        "createdAt": datetime.now(timezone.utc),
    }
    doc_id = store.add(INVOICES, document)
    logger.info(f"Invoice {doc_id} created for tenant: {tenant_id}. Total: {document['totalAmount']:.2f}")
    return Invoice(id=doc_id, **document)


def list_invoices(store: DocumentStore, tenant_id: str) -> List[Invoice]:
    docs = store.where(INVOICES, "tenantId", tenant_id)
    return sort_by_date(Invoice(**doc) for doc in docs)


def get_invoice(store: DocumentStore, tenant_id: str, invoice_id: str) -> Optional[Invoice]:
    doc = store.get(INVOICES, invoice_id)
    # Another tenant's invoice is reported as missing
    if not doc or doc.get("tenantId") != tenant_id:
        return None
    return Invoice(**doc)


def set_invoice_status(store: DocumentStore, tenant_id: str, invoice_id: str, status: DocumentStatus) -> Optional[Invoice]:
    if get_invoice(store, tenant_id, invoice_id) is None:
        return None
    doc = store.update(INVOICES, invoice_id, {"status": DocumentStatus(status).value})
    logger.info(f"Invoice {invoice_id} marked {doc['status']} for tenant: {tenant_id}")
    return Invoice(**doc)


def invoice_export_rows(invoices: List[Invoice], t) -> List[list]:
    return [
        [inv.id, inv.customer_name, inv.date, f"{inv.total_amount:.2f}", t(f"sales.{inv.status}")]
        for inv in invoices
    ]
