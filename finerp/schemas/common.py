from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serializes to camelCase (the stored document shape)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"}, mode="python")

class DocumentStatus(str, Enum):
    DRAFT = "draft"
    PAID = "paid"
    UNPAID = "unpaid"

class StatusUpdate(CamelModel):
    status: DocumentStatus

class DatedModel(CamelModel):
    date: str

    @field_validator("date", mode="before")
    @classmethod
    def validate_date_format(cls, v):
        # Stored as plain YYYY-MM-DD strings
        if isinstance(v, (date, datetime)):
            return v.strftime("%Y-%m-%d")
        if isinstance(v, str):
            try:
                datetime.strptime(v, "%Y-%m-%d")
            except ValueError:
                raise ValueError("Date must be in YYYY-MM-DD format")
        return v
