"""
Pydantic schemas for invoice creation.

InvoiceDraft is the generic, provider-independent invoice. The composer
maps it onto Fiscozen's nested invoice payload.
"""

from datetime import date
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from fiscozen_parser.schemas.clients import ClientRecord
from fiscozen_parser.utils.constants import DEFAULT_CURRENCY


class LineItem(BaseModel):
    """A single invoice row."""
    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(..., min_length=1, description="Row description")
    quantity: Optional[float] = Field(None, gt=0, description="Quantity (Fiscozen accepts null)")
    unit_amount: float = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("unit_amount", "unitAmount", "unitPrice"),
        description="Net unit amount"
    )
    vat_code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("vat_code", "vatCode"),
        description="Informational only: every row uses the fixed exemption profile"
    )


class InvoiceDraft(BaseModel):
    """
    Invoice ready for submission.

    INVARIANT (checked by the composer, not here, so the API can answer
    with the dedicated error codes):
    - at least one line item
    - client.legal_name is not empty
    - client.provider_customer_id is resolved before submission
    """
    model_config = ConfigDict(populate_by_name=True)

    client: ClientRecord
    issue_date: date = Field(
        default_factory=date.today,
        validation_alias=AliasChoices("issue_date", "date"),
    )
    due_date: Optional[date] = Field(
        None,
        validation_alias=AliasChoices("due_date", "dueDate", "paymentDate"),
    )
    line_items: List[LineItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("line_items", "lineItems"),
    )
    notes: str = ""
    currency: str = DEFAULT_CURRENCY


class InvoiceCreateRequest(InvoiceDraft):
    """Request for POST /invoices."""
    auto_create_client: bool = Field(
        True,
        validation_alias=AliasChoices("auto_create_client", "autoCreateClient"),
        description="Create the customer on Fiscozen when search finds no match"
    )


class InvoiceResult(BaseModel):
    """Outcome of a successful invoice submission."""
    id: str
    invoice_number: Optional[str] = None
    customer_id: str


class InvoiceCreateResponse(BaseModel):
    """Response for POST /invoices."""
    success: bool = True
    id: str = Field(..., description="Fiscozen invoice id")
    invoiceNumber: Optional[str] = Field(None, description="Progressive number, when returned")
    customerId: str = Field(..., description="Fiscozen customer the invoice was attached to")
    customerCreated: bool = Field(False, description="True if the customer was created by this call")
