from datetime import datetime, timezone
from typing import Any, List, Optional
from pydantic import Field
from finerp.schemas.common import CamelModel

class ReportSheet(CamelModel):
    name: str
    title: str
    headers: List[str]
    rows: List[List[Any]] = []
    # Template line key per row
    keys: List[str] = []
    # Indentation per row: 0 heading, 1 sub-item, 2 detail
    levels: List[int] = []
    column_formats: List[Optional[str]] = []

class FinancialReport(CamelModel):
    date_from: str
    date_to: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sheets: List[ReportSheet] = []
