from datetime import datetime
from pydantic import Field
from finerp.schemas.common import DatedModel

class LedgerEntryCreate(DatedModel):
    account: str = Field(..., min_length=1)
    description: str = ""
    debit: float = Field(0.0, ge=0)
    credit: float = Field(0.0, ge=0)

class LedgerEntry(LedgerEntryCreate):
    id: str
    tenant_id: str
    created_at: datetime
