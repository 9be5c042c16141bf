"""Lookup routes (/api/v1/lookup): resolve whatever was scanned or typed."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cashdesk.api.deps import get_lookup_service
from cashdesk.api.schemas.common import ErrorResponse
from cashdesk.api.schemas.tickets import TicketTypeResponse
from cashdesk.core.models import TicketLookup
from cashdesk.services.codes import classify, normalize_code, ticket_type_label
from cashdesk.services.lookup import TicketLookupService

router = APIRouter(prefix="/api/v1/lookup", tags=["lookup"])


@router.get(
    "/{code}",
    response_model=TicketLookup,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def lookup_code(
    code: str,
    service: TicketLookupService = Depends(get_lookup_service),
) -> TicketLookup:
    return service.find_by_code(code)


@router.get("/{code}/type", response_model=TicketTypeResponse)
def classify_code(code: str) -> TicketTypeResponse:
    """Classification only, for live feedback while the cashier types."""
    ticket_type = classify(code)
    return TicketTypeResponse(
        code=normalize_code(code),
        ticket_type=str(ticket_type),
        label=ticket_type_label(ticket_type),
    )
