"""
End-to-end workflow: payment text -> customer -> invoice.

The draft is validated before Fiscozen is contacted. Steps are strictly
sequential (the invoice needs the customer id, creation needs a negative
search). Nothing is rolled back: a customer created here stays
created if the invoice is then rejected.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from fiscozen_parser.agents.payment import PaymentAgentOutput, run_payment_agent
from fiscozen_parser.agents.payment.fallback import UNKNOWN_CLIENT
from fiscozen_parser.provider.errors import ExtractionFailed
from fiscozen_parser.schemas.clients import ClientRecord
from fiscozen_parser.schemas.invoices import InvoiceDraft, InvoiceResult, LineItem
from fiscozen_parser.services.customer_service import CustomerResolver, Resolution, ResolutionState
from fiscozen_parser.services.invoice_service import InvoiceComposer, validate_draft
from fiscozen_parser.services.session_log import Event, SessionLog

logger = logging.getLogger(__name__)

Extractor = Callable[[str], PaymentAgentOutput]


@dataclass
class WorkflowOutcome:
    extraction: PaymentAgentOutput
    resolution: Resolution
    invoice: Optional[InvoiceResult]


def client_from_extraction(extraction: PaymentAgentOutput, override: Optional[ClientRecord] = None) -> ClientRecord:
    """
    Build the ClientRecord; non-empty override fields win over extracted ones.

    The regex placeholder name (UNKNOWN_CLIENT) counts as no name at all.
    """
    legal_name = extraction.get("client_name") or ""
    if legal_name == UNKNOWN_CLIENT:
        legal_name = ""

    client = ClientRecord(
        legal_name=legal_name,
        tax_id=extraction.get("vat_number") or "",
        address=extraction.get("address") or "",
    )
    if override is None:
        return client

    updates = {
        name: value
        for name, value in override.model_dump().items()
        if value not in (None, "")
    }
    return client.model_copy(update=updates)


def line_items_from_extraction(extraction: PaymentAgentOutput) -> list[LineItem]:
    items = []
    for service in extraction.get("services") or []:
        items.append(LineItem(
            description=service["description"],
            quantity=service.get("quantity") or None,
            unit_amount=service.get("unit_price") or 0,
        ))
    return items


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.debug(f"Ignoring unparseable extracted date {value!r}")
        return None


class WorkflowService:
    """Sequences extraction, customer resolution and invoice submission."""

    def __init__(
        self,
        resolver: CustomerResolver,
        composer: InvoiceComposer,
        session_log: SessionLog,
        extractor: Extractor = run_payment_agent,
    ):
        self._resolver = resolver
        self._composer = composer
        self._log = session_log
        self._extract = extractor

    def extract(self, text: str) -> PaymentAgentOutput:
        """
        Raises:
            ExtractionFailed: The extractor returned INVALID_TEXT
        """
        extraction = self._extract(text)
        if extraction["status"] != "DRAFT":
            raise ExtractionFailed(extraction.get("reason") or "Could not extract payment data")

        self._log.observe(
            Event.EXTRACTION_COMPLETED,
            "Payment text extracted",
            {"source": extraction["source"], "currency": extraction.get("currency")},
        )
        return extraction

    async def run(
        self,
        text: str,
        *,
        client_override: Optional[ClientRecord] = None,
        issue_date: Optional[date] = None,
        notes: str = "",
        allow_create: bool = True,
    ) -> WorkflowOutcome:
        """
        Run the whole workflow.

        When allow_create is False and no customer matches, the outcome has
        resolution.state == NOT_FOUND and no invoice.

        Raises:
            ExtractionFailed: The text is not a payment notification
            MissingClient, MissingLineItems: Nothing usable was extracted
                (nothing sent to Fiscozen)
        """
        # Gemini's client is synchronous
        extraction = await asyncio.to_thread(self.extract, text)
        client = client_from_extraction(extraction, client_override)

        draft = InvoiceDraft(
            client=client,
            issue_date=issue_date or _parse_date(extraction.get("date")) or date.today(),
            line_items=line_items_from_extraction(extraction),
            notes=notes,
            currency=extraction.get("currency") or "EUR",
        )
        validate_draft(draft, require_customer=False)

        resolution = await self._resolver.resolve_or_create(client, allow_create=allow_create)
        if resolution.state != ResolutionState.RESOLVED:
            return WorkflowOutcome(extraction=extraction, resolution=resolution, invoice=None)

        draft = draft.model_copy(update={
            "client": client.model_copy(update={"provider_customer_id": resolution.customer_id}),
        })
        invoice = await self._composer.submit(draft)
        return WorkflowOutcome(extraction=extraction, resolution=resolution, invoice=invoice)
