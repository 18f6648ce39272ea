"""
Customer resolution against Fiscozen.

State machine:

    SEARCHING -> FOUND ------> RESOLVED
              -> NOT_FOUND --> (create) -> RESOLVED

- A client that already carries provider_customer_id is RESOLVED with zero
  network calls.
- Search uses a first-match policy: no fuzzy ranking, the first row the
  provider returns wins.
- A 401 anywhere clears the session (AuthenticatedClient) and surfaces as
  SessionExpired; the caller logs in again and replays.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from fiscozen_parser.provider.client import AuthenticatedClient, response_body
from fiscozen_parser.provider.envelopes import (
    map_search_result,
    parse_created_id,
    parse_customer_list,
)
from fiscozen_parser.provider.errors import (
    ClientCreationFailed,
    ProviderRequestFailed,
    UnrecognizedResponseShape,
    provider_message,
)
from fiscozen_parser.schemas.clients import ClientRecord, SearchResult
from fiscozen_parser.services.session_log import Event, SessionLog
from fiscozen_parser.utils.constants import (
    CUSTOMER_COUNTRY,
    CUSTOMER_TYPE_COMPANY,
    CUSTOMERS_PATH,
    REFERER_CUSTOMERS,
    SEARCH_PAGE,
    SEARCH_PAGE_SIZE,
)

logger = logging.getLogger(__name__)


class ResolutionState(str, Enum):
    SEARCHING = "SEARCHING"
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    RESOLVED = "RESOLVED"


@dataclass
class Resolution:
    """
    Outcome of resolve_or_create().

    Attributes:
        state: RESOLVED, or NOT_FOUND when creation was not allowed
        customer_id: Fiscozen customer id
        created: True if the customer was created by this resolution
        matched: The search row that was selected, if any
        path: States traversed, e.g. [SEARCHING, NOT_FOUND, RESOLVED]
    """
    state: ResolutionState
    customer_id: str
    created: bool = False
    matched: Optional[SearchResult] = None
    path: Optional[List[ResolutionState]] = None


def build_customer_payload(client: ClientRecord) -> Dict[str, Any]:
    """
    Map a ClientRecord onto Fiscozen's create-customer payload.

    Country and customer type are fixed: the provider only handles Italian
    companies. The VAT number doubles as fiscal code.
    """
    return {
        "country": CUSTOMER_COUNTRY,
        "customer_type": CUSTOMER_TYPE_COMPANY,
        "vat_number": client.tax_id,
        "fiscal_code": client.tax_id,
        "company_name": client.legal_name,
        "postcode": client.postal_code,
        "municipality": client.municipality,
        "province": client.province,
        "address": client.address,
        "contact_person": client.contact_person,
        "email": client.email,
        "phone": client.phone,
        "destination_code": client.recipient_code,
        "pec": client.certified_email,
    }


class CustomerResolver:
    """Search, disambiguate and create Fiscozen customers."""

    def __init__(self, client: AuthenticatedClient, session_log: SessionLog):
        self._client = client
        self._log = session_log

    async def search(self, name: str, tax_id: Optional[str] = None) -> List[SearchResult]:
        """
        Search customers by name.

        Args:
            name: Company name sent as the provider's `search` parameter
            tax_id: Informational; logged, never used to filter

        Returns:
            Normalized rows in provider order. Empty means NOT_FOUND.

        Raises:
            SessionExpired, NotAuthenticated, ProviderUnreachable
            ProviderRequestFailed: Non-2xx answer other than 401
            UnrecognizedResponseShape: Body is none of the known envelopes
        """
        response = await self._client.get(
            CUSTOMERS_PATH,
            params={"search": name, "page": SEARCH_PAGE, "page_size": SEARCH_PAGE_SIZE},
        )
        body = response_body(response)

        if not response.is_success:
            raise ProviderRequestFailed(
                provider_message(body, f"Customer search failed ({response.status_code})"),
                details=body,
                status_code=response.status_code,
            )

        rows = parse_customer_list(body)
        results = [SearchResult(**map_search_result(row)) for row in rows]

        self._log.observe(
            Event.CUSTOMER_SEARCHED,
            "Fiscozen search completed",
            {"companyName": name, "partitaIVA": tax_id, "resultsCount": len(results)},
        )
        return results

    async def create(self, client: ClientRecord) -> str:
        """
        Create a customer on Fiscozen.

        Returns:
            The new customer id.

        Raises:
            ClientCreationFailed: Provider refused the payload (body attached)
        """
        response = await self._client.post(
            CUSTOMERS_PATH,
            json=build_customer_payload(client),
            referer_path=REFERER_CUSTOMERS,
        )
        body = response_body(response)

        if not response.is_success:
            self._log.observe(
                Event.CUSTOMER_CREATION_FAILED,
                "Client creation error",
                {"ragioneSociale": client.legal_name, "status": response.status_code, "responseData": body},
                level="error",
            )
            raise ClientCreationFailed(
                provider_message(body, "Client creation failed"),
                details=body,
                status_code=response.status_code,
            )

        try:
            customer_id = parse_created_id(body, "clientId")
        except UnrecognizedResponseShape as e:
            raise ClientCreationFailed(
                "Provider did not return the new customer id",
                details=body,
            ) from e

        self._log.observe(
            Event.CUSTOMER_CREATED,
            "Fiscozen client created",
            {"clientId": customer_id, "ragioneSociale": client.legal_name},
        )
        return customer_id

    async def resolve_or_create(self, client: ClientRecord, *, allow_create: bool = True) -> Resolution:
        """
        Guarantee a Fiscozen customer id for `client`.

        With allow_create=False a NOT_FOUND search returns a Resolution in
        state NOT_FOUND with an empty customer_id instead of creating.
        """
        if client.provider_customer_id:
            return Resolution(
                state=ResolutionState.RESOLVED,
                customer_id=client.provider_customer_id,
                path=[ResolutionState.RESOLVED],
            )

        path = [ResolutionState.SEARCHING]
        matches = await self.search(client.legal_name, client.tax_id or None)

        if matches:
            path += [ResolutionState.FOUND, ResolutionState.RESOLVED]
            first = matches[0]
            logger.info(
                f"Resolved '{client.legal_name}' to existing customer {first.provider_customer_id} "
                f"({len(matches)} matches)"
            )
            self._log.observe(
                Event.CUSTOMER_RESOLVED,
                "Client resolved from search",
                {"clientId": first.provider_customer_id, "matches": len(matches)},
            )
            return Resolution(
                state=ResolutionState.RESOLVED,
                customer_id=first.provider_customer_id,
                matched=first,
                path=path,
            )

        path.append(ResolutionState.NOT_FOUND)
        if not allow_create:
            return Resolution(state=ResolutionState.NOT_FOUND, customer_id="", path=path)

        customer_id = await self.create(client)
        path.append(ResolutionState.RESOLVED)
        return Resolution(
            state=ResolutionState.RESOLVED,
            customer_id=customer_id,
            created=True,
            path=path,
        )
