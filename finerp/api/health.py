from fastapi import APIRouter
from finerp.core.config import settings

router = APIRouter()

@router.get("/health")
async def health_check():
    return {"status": "ok", "service": settings.PROJECT_NAME, "store": settings.STORE_BACKEND}
