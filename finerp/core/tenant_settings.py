import logging
from finerp.core.config import settings
from finerp.db.store import DocumentStore, SETTINGS
from finerp.schemas.tenant_settings import TenantSettings

logger = logging.getLogger(__name__)


def get_tenant_settings(store: DocumentStore, tenant_id: str) -> TenantSettings:
    doc = store.get(SETTINGS, tenant_id)
    if not doc:
        return TenantSettings(language=settings.DEFAULT_LANGUAGE, default_vat_rate=settings.DEFAULT_VAT_RATE)
    doc.pop("id", None)
    doc.pop("tenantId", None)
    return TenantSettings(**doc)


def save_tenant_settings(store: DocumentStore, tenant_id: str, payload: TenantSettings) -> TenantSettings:
    store.set(SETTINGS, tenant_id, {**payload.to_document(), "tenantId": tenant_id})
    logger.info(f"Settings saved for tenant: {tenant_id}")
    return payload
