"""
Pydantic schemas for customer search and creation.

The presentation layer speaks Italian field names (ragioneSociale,
partitaIVA, ...). They are kept as aliases; the Python side uses the
English names throughout.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ClientRecord(BaseModel):
    """
    A customer as extracted from a payment or typed by the operator.

    provider_customer_id stays None until the customer is confirmed on
    Fiscozen (by search or by creation).
    """
    model_config = ConfigDict(populate_by_name=True)

    legal_name: str = Field("", alias="ragioneSociale", description="Company legal name")
    tax_id: str = Field("", alias="partitaIVA", description="VAT number (partita IVA)")
    address: str = Field("", alias="indirizzo")
    postal_code: str = Field("", alias="cap")
    municipality: str = Field("", alias="comune")
    province: str = Field("", alias="provincia")
    recipient_code: str = Field("", alias="codiceDestinatario", description="SDI recipient code")
    certified_email: str = Field("", alias="pec", description="PEC address")
    email: str = Field("")
    phone: str = Field("", alias="telefono")
    contact_person: str = Field("", alias="referente")
    provider_customer_id: Optional[str] = Field(
        None,
        alias="id",
        description="Fiscozen customer id, once resolved"
    )


class SearchResult(BaseModel):
    """Read projection of a Fiscozen customer. Never persisted."""
    model_config = ConfigDict(populate_by_name=True)

    provider_customer_id: str = Field(..., alias="id")
    legal_name: str = Field("", alias="ragioneSociale")
    tax_id: str = Field("", alias="partitaIVA")
    municipality: str = Field("", alias="comune")
    province: str = Field("", alias="provincia")
    address: str = Field("", alias="indirizzo")
    email: str = Field("")
    phone: str = Field("", alias="telefono")


class SearchResponse(BaseModel):
    """Response for GET /search."""
    success: bool = True
    results: List[SearchResult] = Field(default_factory=list)


class ClientCreateResponse(BaseModel):
    """Response for POST /clients."""
    success: bool = True
    id: str = Field(..., description="Fiscozen customer id")
