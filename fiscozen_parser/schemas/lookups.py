"""
Pydantic schemas for VAT and postal code lookups.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class VatValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vat_number: str = Field("", alias="partitaIVA", description="Italian VAT number, with or without IT prefix")


class VatValidationResponse(BaseModel):
    valid: bool
    details: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class LocationResponse(BaseModel):
    comune: str = ""
    provincia: str = ""
    error: Optional[str] = None
