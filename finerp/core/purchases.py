from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from finerp.db.store import DocumentStore, BILLS
from finerp.schemas.common import DocumentStatus
from finerp.schemas.bill import Bill, BillCreate, BillItem
from finerp.core.periods import sort_by_date

logger = logging.getLogger(__name__)


def calculate_amounts(quantity: float, rate: float, vat_rate: float) -> Tuple[float, float]:
    amount = quantity * rate
    vat_amount = amount * (vat_rate / 100)
    return round(amount, 2), round(vat_amount, 2)


def bill_number(doc_id: str) -> str:
    return f"BILL-{doc_id[:8].upper()}"


def price_items(items: List[BillItem]) -> List[BillItem]:
    priced = []
    for item in items:
        amount, vat_amount = calculate_amounts(item.quantity, item.rate, item.vat_rate)
        priced.append(item.model_copy(update={"amount": amount, "vat_amount": vat_amount}))
    return priced


def _to_bill(doc: dict) -> Bill:
    # billNo is always derived from the document id
    return Bill(**{**doc, "billNo": bill_number(doc["id"])})


def create_bill(store: DocumentStore, tenant_id: str, payload: BillCreate) -> Bill:
    items = price_items(payload.items)
    document = {
        "vendor": payload.vendor,
        "date": payload.date,
        "items": [item.to_document() for item in items],
        "total": round(sum(item.amount for item in items), 2),
        "totalVat": round(sum(item.vat_amount for item in items), 2),
        "status": DocumentStatus.DRAFT.value,
        "tenantId": tenant_id,
        "createdAt": datetime.now(timezone.utc),
    }
    doc_id = store.add(BILLS, document)
    logger.info(f"Bill {doc_id} created for tenant: {tenant_id}. Total: {document['total']:.2f}, VAT: {document['totalVat']:.2f}")
    return _to_bill({"id": doc_id, **document})


def list_bills(store: DocumentStore, tenant_id: str) -> List[Bill]:
    docs = store.where(BILLS, "tenantId", tenant_id)
    return sort_by_date(_to_bill(doc) for doc in docs)


def get_bill(store: DocumentStore, tenant_id: str, bill_id: str) -> Optional[Bill]:
    doc = store.get(BILLS, bill_id)
    if not doc or doc.get("tenantId") != tenant_id:
        return None
    return _to_bill(doc)


def set_bill_status(store: DocumentStore, tenant_id: str, bill_id: str, status: DocumentStatus) -> Optional[Bill]:
    if get_bill(store, tenant_id, bill_id) is None:
        return None
    doc = store.update(BILLS, bill_id, {"status": DocumentStatus(status).value})
    logger.info(f"Bill {bill_id} marked {doc['status']} for tenant: {tenant_id}")
    return _to_bill(doc)


def bill_export_rows(bills: List[Bill], t) -> List[list]:
    return [
        [b.bill_no, b.vendor, b.date, f"{b.total:.2f}", f"{b.total_vat:.2f}", t(f"purchases.{b.status}")]
        for b in bills
    ]
