from datetime import datetime
from typing import List
from pydantic import Field
from finerp.schemas.common import CamelModel, DatedModel, DocumentStatus

class BillItem(CamelModel):
    description: str = ""
    quantity: float = Field(0, ge=0)
    rate: float = Field(0.0, ge=0)
    vat_rate: float = Field(13.0, ge=0)
    amount: float = 0.0
    vat_amount: float = 0.0

class BillCreate(DatedModel):
    vendor: str = Field(..., min_length=1)
    items: List[BillItem] = Field(..., min_length=1)

class Bill(BillCreate):
    id: str
    bill_no: str
    total: float
    total_vat: float
    status: DocumentStatus = DocumentStatus.DRAFT
    tenant_id: str
    created_at: datetime
