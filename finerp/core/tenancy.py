"""
Tenant resolution for requests.

The tenant id is taken as presented: a session cookie set at login or an
X-Tenant-ID header. Nothing here authenticates the caller; whoever sends an
id acts as that tenant. Authentication belongs in front of this service.
"""
from typing import Optional
from fastapi import HTTPException, Request
from finerp.core.config import settings

MISSING_TENANT_DETAIL = "Missing tenant identifier"


def tenant_from_request(request: Request) -> Optional[str]:
    """Session cookie first (web pages), then the X-Tenant-ID header (API clients)."""
    tenant_id = request.cookies.get(settings.TENANT_COOKIE) or request.headers.get("X-Tenant-ID")
    if tenant_id:
        tenant_id = tenant_id.strip()
    return tenant_id or None


def current_tenant(request: Request) -> str:
    tenant_id = getattr(request.state, "tenant_id", None) or tenant_from_request(request)
    if not tenant_id:
        raise HTTPException(status_code=400, detail=MISSING_TENANT_DETAIL)
    return tenant_id


def current_user(request: Request) -> str:
    return request.cookies.get(settings.USER_COOKIE) or "anonymous"
