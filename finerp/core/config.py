from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "FinNepal ERP"
    API_PREFIX: str = "/api"

    # Document store: "memory" or "firestore"
    STORE_BACKEND: str = "memory"
    FIRESTORE_PROJECT: Optional[str] = None

    DEFAULT_LANGUAGE: str = "en"
    DEFAULT_VAT_RATE: float = 13.0

    TENANT_COOKIE: str = "finerp_tenant_id"
    USER_COOKIE: str = "finerp_user"
    LANGUAGE_COOKIE: str = "finerp_lang"

    # Most recent audit entries kept in memory
    AUDIT_LOG_MAX_ENTRIES: int = 10000

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    # TTF with Devanagari glyphs, needed for Nepali PDFs
    PDF_FONT_PATH: Optional[str] = None

    class Config:
        case_sensitive = True

settings = Settings()
