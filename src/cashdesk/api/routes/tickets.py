"""Physical ticket routes: /api/v1/tickets.

Issuance, lookup, gameplay updates from the game backend, and payout
previews. Ticket errors are rendered as RFC 7807 responses by the handler
registered in :mod:`cashdesk.api.middleware`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from cashdesk.api.deps import (
    PaginationParams,
    get_pagination,
    get_payout_service,
    get_ticket_service,
)
from cashdesk.api.schemas.common import ErrorResponse, PaginatedResponse
from cashdesk.api.schemas.tickets import GameplayUpdate, TicketCreate
from cashdesk.core.constants import PayoutMode, TicketStatus
from cashdesk.core.models import (
    CreateTicketParams,
    GameplayDelta,
    PayoutCalculation,
    PhysicalTicket,
    TicketStats,
)
from cashdesk.services.payouts import PayoutService
from cashdesk.services.tickets import TicketService

router = APIRouter(prefix="/api/v1/tickets", tags=["tickets"])

_NOT_FOUND: dict[int | str, dict[str, Any]] = {404: {"model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=PhysicalTicket,
    responses={400: {"model": ErrorResponse}},
)
def create_ticket(
    body: TicketCreate,
    service: TicketService = Depends(get_ticket_service),
) -> PhysicalTicket:
    """Issue a new ticket against a cash deposit."""
    return service.create_ticket(CreateTicketParams(**body.model_dump()))


@router.get("", response_model=PaginatedResponse[PhysicalTicket])
def list_tickets(
    status: TicketStatus | None = None,
    pagination: PaginationParams = Depends(get_pagination),
    service: TicketService = Depends(get_ticket_service),
) -> dict[str, Any]:
    """List tickets with pagination, newest issuance last."""
    return service.list_tickets(status=status, page=pagination.page, limit=pagination.limit)


@router.get("/stats", response_model=TicketStats)
def ticket_stats(service: TicketService = Depends(get_ticket_service)) -> TicketStats:
    """Counts per status and deposit/payout totals."""
    return service.get_stats()


@router.get("/by-code/{code}", response_model=PhysicalTicket, responses=_NOT_FOUND)
def get_ticket_by_code(
    code: str,
    service: TicketService = Depends(get_ticket_service),
) -> PhysicalTicket:
    return service.get_by_code(code)


@router.get("/{ticket_id}", response_model=PhysicalTicket, responses=_NOT_FOUND)
def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
) -> PhysicalTicket:
    return service.get_by_id(ticket_id)


@router.post(
    "/{ticket_id}/gameplay",
    response_model=PhysicalTicket,
    responses={**_NOT_FOUND, 400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def apply_gameplay(
    ticket_id: str,
    body: GameplayUpdate,
    service: TicketService = Depends(get_ticket_service),
) -> PhysicalTicket:
    """Apply a stake/winnings update reported by the game backend."""
    return service.apply_gameplay(ticket_id, GameplayDelta(**body.model_dump()))


@router.get("/{ticket_id}/payout", response_model=PayoutCalculation, responses=_NOT_FOUND)
def preview_payout(
    ticket_id: str,
    mode: PayoutMode = Query(default=PayoutMode.WINNINGS_PLUS_BALANCE),
    service: PayoutService = Depends(get_payout_service),
) -> PayoutCalculation:
    """Show what a payout would hand over, without committing it."""
    return service.preview_payout(ticket_id, mode)
