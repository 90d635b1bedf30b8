from fastapi import APIRouter, Depends

from finerp.api.deps import store_unavailable
from finerp.core.tenancy import current_tenant
from finerp.core.tenant_settings import get_tenant_settings, save_tenant_settings
from finerp.db.session import get_store
from finerp.db.store import DocumentStore, StoreError
from finerp.schemas.tenant_settings import TenantSettings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=TenantSettings)
def read_settings(
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return get_tenant_settings(store, tenant_id)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)


@router.put("", response_model=TenantSettings)
def update_settings(
    payload: TenantSettings,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
):
    try:
        return save_tenant_settings(store, tenant_id, payload)
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
