from datetime import datetime
from typing import List
from pydantic import Field
from finerp.schemas.common import CamelModel, DatedModel

class JournalLine(CamelModel):
    account: str = Field(..., min_length=1)
    debit: float = Field(0.0, ge=0)
    credit: float = Field(0.0, ge=0)

class JournalEntryCreate(DatedModel):
    description: str = ""
    entries: List[JournalLine] = Field(..., min_length=1)

class JournalEntry(JournalEntryCreate):
    id: str
    tenant_id: str
    created_at: datetime
    # Reported as-is; journals are not required to balance.
    total_debit: float = 0.0
    total_credit: float = 0.0
