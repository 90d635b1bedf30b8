from pydantic import Field
from finerp.schemas.common import CamelModel

class TenantSettings(CamelModel):
    company_name: str = ""
    pan_number: str = ""
    address: str = ""
    language: str = Field("en", pattern="^(en|ne)$")
    default_vat_rate: float = Field(13.0, ge=0)
