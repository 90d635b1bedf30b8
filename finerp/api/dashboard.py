from fastapi import APIRouter, Depends
import logging

from finerp.api.deps import current_translator, store_unavailable
from finerp.core.dashboard import build_dashboard
from finerp.core.i18n import Translator
from finerp.core.purchases import list_bills
from finerp.core.sales import list_invoices
from finerp.core.tenancy import current_tenant
from finerp.db.session import get_store
from finerp.db.store import DocumentStore, StoreError
from finerp.schemas.dashboard import Dashboard

router = APIRouter(tags=["dashboard"])
logger = logging.getLogger(__name__)


def load_dashboard(store: DocumentStore, tenant_id: str, t: Translator) -> Dashboard:
    invoices = list_invoices(store, tenant_id)
    bills = list_bills(store, tenant_id)
    logger.info(f"Dashboard for tenant: {tenant_id} from {len(invoices)} invoices and {len(bills)} bills")
    return build_dashboard(invoices, bills, t)


@router.get("/dashboard", response_model=Dashboard)
def get_dashboard(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
    t: Translator = Depends(current_translator),
):
    try:
        return load_dashboard(store, tenant_id, t)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
