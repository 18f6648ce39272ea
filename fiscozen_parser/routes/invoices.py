"""
Invoice creation endpoint.

Flow for POST /invoices:
1. Validate the draft (line items, client name) - no network call on failure
2. Resolve the customer: given id, else first search match, else create
   (creation only when autoCreateClient is true)
3. Prefetch the customer detail and submit the invoice

Nothing is rolled back: a customer created in step 2 stays created if the
provider then rejects the invoice.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fiscozen_parser.auth.dependencies import get_authenticated_client
from fiscozen_parser.provider.client import AuthenticatedClient
from fiscozen_parser.schemas.invoices import (
    InvoiceCreateRequest,
    InvoiceCreateResponse,
    InvoiceDraft,
)
from fiscozen_parser.services.customer_service import CustomerResolver, ResolutionState
from fiscozen_parser.services.invoice_service import InvoiceComposer, validate_draft
from fiscozen_parser.services.session_log import SessionLog, get_session_log

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invoices"])


@router.post(
    "/invoices",
    response_model=InvoiceCreateResponse,
    status_code=status.HTTP_200_OK,
    summary="Create a Fiscozen invoice",
    description="""
    Create an invoice for a client, resolving or creating the customer first.

    Every row is issued under the flat-rate regime exemption (N2.2); the
    optional vat_code on line items is ignored.

    Answers 400 with `needsClientCreation: true` when no customer matches
    and autoCreateClient is false.
    """
)
async def create_invoice(
    request: InvoiceCreateRequest,
    client: Annotated[AuthenticatedClient, Depends(get_authenticated_client)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
):
    # Raises MissingLineItems / MissingClient before anything is sent
    validate_draft(request, require_customer=False)

    resolver = CustomerResolver(client, session_log)
    resolution = await resolver.resolve_or_create(
        request.client,
        allow_create=request.auto_create_client,
    )

    if resolution.state != ResolutionState.RESOLVED:
        logger.info(f"No customer for {request.client.legal_name!r}, creation disabled")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Client not found. Please create client first.",
                "code": "missing_client",
                "needsClientCreation": True,
            },
        )

    draft = InvoiceDraft(
        client=request.client.model_copy(update={"provider_customer_id": resolution.customer_id}),
        issue_date=request.issue_date,
        due_date=request.due_date,
        line_items=request.line_items,
        notes=request.notes,
        currency=request.currency,
    )

    composer = InvoiceComposer(client, session_log)
    result = await composer.submit(draft)

    return InvoiceCreateResponse(
        id=result.id,
        invoiceNumber=result.invoice_number,
        customerId=result.customer_id,
        customerCreated=resolution.created,
    )
