from datetime import date
from typing import Optional, Tuple
from fastapi import Depends, HTTPException, Query, Request
from finerp.core.config import settings
from finerp.core.periods import resolve_date_range
from finerp.core.i18n import Translator, get_translator, resolve_language
from finerp.core.tenancy import current_tenant
from finerp.core.tenant_settings import get_tenant_settings
from finerp.db.session import get_store
from finerp.db.store import DocumentStore, StoreError
import logging

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE = "Document store unavailable"


def store_unavailable(e: StoreError, tenant_id: str) -> HTTPException:
    logger.error(f"Document store failure for tenant {tenant_id}: {e}")
    return HTTPException(status_code=502, detail=STORE_UNAVAILABLE)


def current_language(
    request: Request,
    tenant_id: str = Depends(current_tenant),
    store: DocumentStore = Depends(get_store),
) -> str:
    try:
        tenant_lang = get_tenant_settings(store, tenant_id).language
    except StoreError as e:
        raise store_unavailable(e, tenant_id)
    return resolve_language(
        query_lang=request.query_params.get("lang"),
        cookie_lang=request.cookies.get(settings.LANGUAGE_COOKIE),
        tenant_lang=tenant_lang,
        accept_language=request.headers.get("Accept-Language"),
    )


def current_translator(lang: str = Depends(current_language)) -> Translator:
    return get_translator(lang)


ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def date_range(
    date_from: Optional[str] = Query(None, alias="from", pattern=ISO_DATE_PATTERN),
    date_to: Optional[str] = Query(None, alias="to", pattern=ISO_DATE_PATTERN),
) -> Tuple[str, str]:
    start, end = resolve_date_range(date_from, date_to)
    try:
        date.fromisoformat(start)
        date.fromisoformat(end)
    except ValueError:
        raise HTTPException(status_code=422, detail="Date must be in YYYY-MM-DD format")
    return start, end
