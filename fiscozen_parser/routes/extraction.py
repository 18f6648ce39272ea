"""
Payment text extraction and the end-to-end workflow.

POST /extract   -> preview only, never touches Fiscozen
POST /workflow  -> extract, resolve/create the customer, submit the invoice

When Supabase is configured each workflow run is also stored as a session
record (see /api/data/sessions).
"""

import asyncio
import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fiscozen_parser.agents.payment import PaymentAgentOutput, run_payment_agent
from fiscozen_parser.auth.dependencies import get_authenticated_client
from fiscozen_parser.db.client import get_supabase_client
from fiscozen_parser.provider.client import AuthenticatedClient
from fiscozen_parser.provider.errors import ExtractionFailed
from fiscozen_parser.schemas.extraction import (
    ExtractionData,
    ExtractRequest,
    ExtractResponse,
    ResolutionResponse,
    ServiceLineResponse,
    WorkflowRequest,
    WorkflowResponse,
)
from fiscozen_parser.services.customer_service import CustomerResolver, ResolutionState
from fiscozen_parser.services.invoice_service import InvoiceComposer
from fiscozen_parser.services.session_log import SessionLog, get_session_log
from fiscozen_parser.services.session_record_service import save_session_record
from fiscozen_parser.services.workflow_service import (
    WorkflowOutcome,
    WorkflowService,
    client_from_extraction,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["extraction"])


def to_extraction_data(extraction: PaymentAgentOutput) -> ExtractionData:
    return ExtractionData(
        clientName=extraction.get("client_name") or "",
        vatNumber=extraction.get("vat_number") or "",
        address=extraction.get("address") or "",
        amount=extraction.get("amount") or 0.0,
        currency=extraction.get("currency") or "EUR",
        description=extraction.get("description") or "",
        date=extraction.get("date"),
        services=[
            ServiceLineResponse(
                description=service["description"],
                quantity=service["quantity"],
                unitPrice=service["unit_price"],
            )
            for service in extraction.get("services") or []
        ],
        source=extraction["source"],
    )


def _record_status(outcome: WorkflowOutcome) -> str:
    if outcome.resolution.state != ResolutionState.RESOLVED:
        return "client_not_found"
    if outcome.resolution.created:
        return "client_created"
    return "client_found"


async def _save_record(outcome: WorkflowOutcome, request: WorkflowRequest) -> None:
    supabase_client = get_supabase_client()
    if supabase_client is None:
        return

    client = client_from_extraction(outcome.extraction, request.client)
    matched: Optional[Dict[str, Any]] = (
        outcome.resolution.matched.model_dump(by_alias=True)
        if outcome.resolution.matched else None
    )
    try:
        await save_session_record(
            supabase_client,
            client_data=client.model_dump(by_alias=True),
            search_results=[matched] if matched else [],
            status=_record_status(outcome),
            created_client_id=outcome.resolution.customer_id if outcome.resolution.created else None,
        )
    except Exception as e:
        logger.warning(f"Could not save workflow session record: {e}")


@router.post(
    "/extract",
    response_model=ExtractResponse,
    summary="Extract client and amounts from payment text",
)
async def extract_payment(request: ExtractRequest) -> ExtractResponse:
    """
    Preview extraction. Uses Gemini when GOOGLE_API_KEY is set, otherwise
    (or when the model answer is unusable) the regex extractor.
    """
    extraction = await asyncio.to_thread(run_payment_agent, request.text)
    if extraction["status"] != "DRAFT":
        raise ExtractionFailed(extraction.get("reason") or "Could not extract payment data")

    logger.info(f"Payment text extracted with source={extraction['source']}")
    return ExtractResponse(data=to_extraction_data(extraction))


@router.post(
    "/workflow",
    response_model=WorkflowResponse,
    summary="Payment text to Fiscozen invoice",
    description="""
    Run the whole pipeline on one payment notification.

    `client` fields override the extracted ones. With autoCreateClient=false
    and no matching customer the call answers 400 with
    `needsClientCreation: true` and nothing is created.
    """
)
async def run_workflow(
    request: WorkflowRequest,
    client: Annotated[AuthenticatedClient, Depends(get_authenticated_client)],
    session_log: Annotated[SessionLog, Depends(get_session_log)],
):
    service = WorkflowService(
        CustomerResolver(client, session_log),
        InvoiceComposer(client, session_log),
        session_log,
        extractor=run_payment_agent,
    )
    outcome = await service.run(
        request.text,
        client_override=request.client,
        issue_date=request.issue_date,
        notes=request.notes,
        allow_create=request.auto_create_client,
    )
    await _save_record(outcome, request)

    response = WorkflowResponse(
        extraction=to_extraction_data(outcome.extraction),
        resolution=ResolutionResponse(
            state=outcome.resolution.state.value,
            customerId=outcome.resolution.customer_id,
            created=outcome.resolution.created,
            path=[state.value for state in outcome.resolution.path or []],
        ),
    )

    if outcome.invoice is None:
        response.success = False
        response.needsClientCreation = True
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(),
        )

    response.id = outcome.invoice.id
    response.invoiceNumber = outcome.invoice.invoice_number
    return response
