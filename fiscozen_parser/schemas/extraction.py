"""
Pydantic schemas for payment-text extraction and the end-to-end workflow.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from fiscozen_parser.schemas.clients import ClientRecord


class ExtractRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Payment notification text")


class ServiceLineResponse(BaseModel):
    description: str
    quantity: float = 1.0
    unitPrice: float = 0.0


class ExtractionData(BaseModel):
    """Structured view of a payment notification."""
    clientName: str = ""
    vatNumber: str = ""
    address: str = ""
    amount: float = 0.0
    currency: str = "EUR"
    description: str = ""
    date: Optional[str] = None
    services: List[ServiceLineResponse] = Field(default_factory=list)
    source: Literal["llm", "regex"] = Field(..., description="Which extractor produced the data")


class ExtractResponse(BaseModel):
    success: bool = True
    data: ExtractionData


class WorkflowRequest(BaseModel):
    """
    Request for POST /workflow.

    `client` overrides extracted client fields (non-empty values win), e.g.
    after the operator completed the address or picked a search result.
    """
    text: str = Field(..., min_length=1)
    client: Optional[ClientRecord] = None
    issue_date: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("issue_date", "date"),
    )
    notes: str = ""
    auto_create_client: bool = Field(
        True,
        validation_alias=AliasChoices("auto_create_client", "autoCreateClient"),
    )


class ResolutionResponse(BaseModel):
    state: str
    customerId: str
    created: bool
    path: List[str] = Field(default_factory=list)


class WorkflowResponse(BaseModel):
    success: bool = True
    extraction: ExtractionData
    resolution: ResolutionResponse
    id: Optional[str] = Field(None, description="Fiscozen invoice id")
    invoiceNumber: Optional[str] = None
    needsClientCreation: bool = False
