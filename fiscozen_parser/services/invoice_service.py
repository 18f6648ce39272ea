"""
Invoice composition and submission.

CRITICAL RULES:
1. Validation (line items, client name, customer id) happens before any
   network call
2. Every row carries the same exemption profile (EXEMPTION_PROFILE); this
   is the flat-rate (forfettario) regime, not a general tax engine
3. Submission is single-attempt: the provider's idempotency is unknown, so
   a retry could create a duplicate invoice
4. Provider error bodies are forwarded verbatim in InvoiceRejected.details
"""

import logging
from copy import deepcopy
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List

from fiscozen_parser.provider.client import AuthenticatedClient, response_body
from fiscozen_parser.provider.envelopes import parse_created_id, parse_invoice_number
from fiscozen_parser.provider.errors import (
    InvoiceRejected,
    MissingClient,
    MissingLineItems,
    ProviderError,
    SessionExpired,
    UnrecognizedResponseShape,
    provider_message,
)
from fiscozen_parser.schemas.invoices import InvoiceDraft, InvoiceResult, LineItem
from fiscozen_parser.services.session_log import Event, SessionLog
from fiscozen_parser.utils.constants import (
    CUSTOMER_DETAIL_PATH,
    EXEMPTION_PROFILE,
    FISCAL_REGIME,
    INVOICE_REGIME_FLAGS,
    INVOICES_PATH,
    REFERER_NEW_INVOICE,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def q_money(x) -> str:
    return str(Decimal(str(x)).quantize(CENT, rounding=ROUND_HALF_UP))


def build_row(index: int, item: LineItem) -> Dict[str, Any]:
    """Map one line item onto a Fiscozen invoice row."""
    if item.quantity is None:
        total = q_money(item.unit_amount)
        quantity = None
    else:
        total = q_money(Decimal(str(item.unit_amount)) * Decimal(str(item.quantity)))
        quantity = item.quantity

    return {
        "key": f"row{index}",
        "description": item.description,
        "quantity": quantity,
        "amount": q_money(item.unit_amount),
        "total": total,
        "invoice_vat": deepcopy(EXEMPTION_PROFILE),
        "welfare_applied": False,
        "enasarco_applied": False,
        "ex_enpals_applied": False,
    }


def build_invoice_payload(draft: InvoiceDraft, customer_id: str) -> Dict[str, Any]:
    """
    Build Fiscozen's nested invoice payload.

    payment_due_date falls back to the issue date, as the web app does.
    """
    issue_date = draft.issue_date.isoformat()
    rows: List[Dict[str, Any]] = [
        build_row(index, item) for index, item in enumerate(draft.line_items, start=1)
    ]

    payload: Dict[str, Any] = {
        "customer": customer_id,
        "invoice_date": issue_date,
        "payment_due_date": draft.due_date.isoformat() if draft.due_date else issue_date,
        "self_invoice": False,
        "rows": rows,
        "notes": [draft.notes] if draft.notes else [],
        "currency_code": draft.currency,
        "fiscal_regime": FISCAL_REGIME,
    }
    payload.update(INVOICE_REGIME_FLAGS)
    return payload


def validate_draft(draft: InvoiceDraft, *, require_customer: bool = True) -> None:
    """
    Raises:
        MissingLineItems: No rows
        MissingClient: Empty legal name, or unresolved customer id when
            require_customer is set
    """
    if not draft.line_items:
        raise MissingLineItems("Client data and line items required")
    if not draft.client.legal_name.strip():
        raise MissingClient("Client data and line items required")
    if require_customer and not draft.client.provider_customer_id:
        raise MissingClient("Client not found. Please create client first.")


class InvoiceComposer:
    """Submits InvoiceDrafts to Fiscozen through an AuthenticatedClient."""

    def __init__(self, client: AuthenticatedClient, session_log: SessionLog):
        self._client = client
        self._log = session_log

    async def _prefetch_customer(self, customer_id: str, issue_date: str) -> None:
        """
        Load the customer detail for the invoice date.

        The web app does this before every invoice; failures other than an
        expired session are tolerated.
        """
        try:
            response = await self._client.get(
                CUSTOMER_DETAIL_PATH.format(customer_id=customer_id),
                params={"invoice_date": issue_date},
            )
        except SessionExpired:
            raise
        except ProviderError as e:
            logger.warning(f"Customer detail prefetch failed for {customer_id}: {e.message}")
            return

        if not response.is_success:
            logger.warning(
                f"Customer detail prefetch for {customer_id} answered {response.status_code}"
            )

    async def submit(self, draft: InvoiceDraft) -> InvoiceResult:
        """
        Create the invoice on Fiscozen.

        Raises:
            MissingLineItems, MissingClient: Invalid draft (nothing sent)
            SessionExpired, NotAuthenticated, ProviderUnreachable
            InvoiceRejected: Provider refused the invoice (body attached)
        """
        validate_draft(draft)
        customer_id = draft.client.provider_customer_id
        assert customer_id is not None

        await self._prefetch_customer(customer_id, draft.issue_date.isoformat())

        payload = build_invoice_payload(draft, customer_id)
        self._log.observe(
            Event.INVOICE_SUBMITTED,
            "Submitting invoice to Fiscozen",
            {"clientName": draft.client.legal_name, "customer": customer_id, "rows": len(payload["rows"])},
        )

        response = await self._client.post(
            INVOICES_PATH,
            json=payload,
            referer_path=REFERER_NEW_INVOICE,
        )
        body = response_body(response)

        if not response.is_success:
            self._log.observe(
                Event.INVOICE_REJECTED,
                "Invoice creation error",
                {"status": response.status_code, "responseData": body, "customer": customer_id},
                level="error",
            )
            raise InvoiceRejected(
                provider_message(body, f"Invoice rejected by provider ({response.status_code})"),
                details=body,
                status_code=response.status_code,
            )

        try:
            invoice_id = parse_created_id(body, "invoiceId")
        except UnrecognizedResponseShape as e:
            raise InvoiceRejected(
                "Provider accepted the invoice but returned no id",
                details=body,
            ) from e

        invoice_number = parse_invoice_number(body)
        self._log.observe(
            Event.INVOICE_CREATED,
            "Fiscozen invoice created",
            {
                "invoiceId": invoice_id,
                "invoiceNumber": invoice_number,
                "clientName": draft.client.legal_name,
                "responseStatus": response.status_code,
            },
        )
        return InvoiceResult(id=invoice_id, invoice_number=invoice_number, customer_id=customer_id)
