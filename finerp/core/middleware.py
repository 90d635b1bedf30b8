from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse, RedirectResponse
import hashlib
from finerp.core.audit import audit_repo
from finerp.core.config import settings
from finerp.core.tenancy import MISSING_TENANT_DETAIL, tenant_from_request
from finerp.schemas.audit import AuditLogEntry, AuditStatus
import logging
from typing import Callable

logger = logging.getLogger(__name__)

PUBLIC_PREFIXES = ["/login", "/logout", "/health", "/lang", "/static"]

# First matching fragment wins
ACTION_TYPES = [
    ("/pdf", "PDF_DOWNLOAD"),
    ("/export", "EXPORT"),
    ("ledger-entries", "LEDGER"),
    ("journal-entries", "JOURNAL"),
    ("invoices", "SALES"),
    ("bills", "PURCHASES"),
    ("dashboard", "DASHBOARD"),
    ("reports", "REPORTS"),
    ("settings", "SETTINGS"),
    ("health", "HEALTH_CHECK"),
    ("login", "LOGIN"),
    ("logout", "LOGOUT"),
]


def action_type_for(endpoint: str) -> str:
    for fragment, action in ACTION_TYPES:
        if fragment in endpoint:
            return action
    return "PAGE_VIEW"


def is_public_path(endpoint: str) -> bool:
    return any(endpoint == p or endpoint.startswith(p + "/") for p in PUBLIC_PREFIXES)


def is_api_path(endpoint: str) -> bool:
    prefix = settings.API_PREFIX
    return endpoint == prefix or endpoint.startswith(prefix + "/")


class TenantAuditMiddleware(BaseHTTPMiddleware):
    """Resolves the tenant for every request, guards private routes and audits the exchange."""

    def _record(self, **fields):
        try:
            audit_repo.save(AuditLogEntry(**fields))
        except Exception as e:
            logger.error(f"Audit Logging Failed: {e}")

    async def dispatch(self, request: Request, call_next: Callable):
        endpoint = request.url.path
        method = request.method
        action_type = action_type_for(endpoint)
        actor = request.cookies.get(settings.USER_COOKIE) or "anonymous"

        tenant_id = tenant_from_request(request)
        is_public = is_public_path(endpoint)

        logger.debug(f"Request to {endpoint}, tenant_id={tenant_id}, is_public={is_public}")

        if not tenant_id and not is_public:
            if is_api_path(endpoint):
                response = JSONResponse(status_code=400, content={"detail": MISSING_TENANT_DETAIL})
            else:
                # Private page: send the browser to sign in
                response = RedirectResponse(url="/login", status_code=303)
            self._record(
                endpoint=endpoint,
                method=method,
                action_type=action_type,
                actor=actor,
                tenant_id="MISSING",
                status=AuditStatus.FAILURE,
            )
            return response

        request.state.tenant_id = tenant_id
        tenant_for_log = tenant_id or "PUBLIC"

        request_body_bytes = await request.body()
        # Always hash the body, even if empty, for determinism
        input_hash = hashlib.sha256(request_body_bytes).hexdigest()

        async def receive():
            return {"type": "http.request", "body": request_body_bytes}
        request._receive = receive

        status = AuditStatus.FAILURE
        output_hash = None
        try:
            response = await call_next(request)
            if 200 <= response.status_code < 400:
                status = AuditStatus.SUCCESS

            response_body_bytes = b""
            async for chunk in response.body_iterator:
                response_body_bytes += chunk
            output_hash = hashlib.sha256(response_body_bytes).hexdigest()

            replayed = Response(content=response_body_bytes, status_code=response.status_code)
            # Keep repeated headers (several Set-Cookie on login)
            replayed.raw_headers = list(response.raw_headers)
            response = replayed
        finally:
            self._record(
                endpoint=endpoint,
                method=method,
                action_type=action_type,
                actor=actor,
                tenant_id=tenant_for_log,
                input_hash=input_hash,
                output_hash=output_hash,
                status=status,
            )

        return response
