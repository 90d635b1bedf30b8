from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from finerp.core.config import settings
from finerp.core.logging_config import configure_logging
from finerp.core.middleware import TenantAuditMiddleware
from finerp.db.store import StoreError
from finerp.api import dashboard, health, journal, ledger, purchases, reports, sales, web
from finerp.api import settings as tenant_settings
from finerp.api.deps import STORE_UNAVAILABLE

configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)
app.add_middleware(TenantAuditMiddleware)

# Include routers
app.include_router(health.router)
for module in (ledger, journal, sales, purchases, dashboard, reports, tenant_settings):
    app.include_router(module.router, prefix=settings.API_PREFIX)
app.include_router(web.router)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Document store failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": STORE_UNAVAILABLE})


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.PROJECT_NAME} starting with {settings.STORE_BACKEND} store")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.PROJECT_NAME} shutting down")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
