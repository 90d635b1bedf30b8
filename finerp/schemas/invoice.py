from datetime import datetime
from typing import List
from pydantic import Field
from finerp.schemas.common import CamelModel, DatedModel, DocumentStatus

class InvoiceItem(CamelModel):
    description: str = ""
    quantity: float = Field(1, ge=0)
    rate: float = Field(0.0, ge=0)
    amount: float = 0.0

class InvoiceCreate(DatedModel):
    customer_name: str = Field(..., min_length=1)
    items: List[InvoiceItem] = Field(..., min_length=1)

class Invoice(InvoiceCreate):
    id: str
    total_amount: float
    status: DocumentStatus = DocumentStatus.DRAFT
    tenant_id: str
    created_at: datetime
