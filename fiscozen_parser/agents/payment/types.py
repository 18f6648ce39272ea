"""
PaymentAgent Type Definitions

Input/output contracts for payment-text extraction.
All types are JSON-serializable and compatible with Pydantic.
"""

from typing import Literal, Optional, TypedDict


class ServiceLine(TypedDict):
    """One service or product the payment was for."""
    description: str
    quantity: float
    unit_price: float


class PaymentAgentOutput(TypedDict):
    """Output schema for PaymentAgent."""
    status: Literal["DRAFT", "INVALID_TEXT"]
    source: Literal["llm", "regex"]

    # Present when status == "DRAFT"
    client_name: Optional[str]
    vat_number: Optional[str]
    address: Optional[str]
    amount: Optional[float]
    currency: Optional[str]
    description: Optional[str]
    date: Optional[str]  # YYYY-MM-DD
    services: Optional[list[ServiceLine]]

    # Present when status != "DRAFT"
    reason: Optional[str]
