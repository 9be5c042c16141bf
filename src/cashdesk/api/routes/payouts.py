"""Payout routes: /api/v1/payouts and /api/v1/draw-tickets.

Both endpoints answer with a ``PayoutResult`` body. The HTTP status mirrors
the result: 200 on success, 404 for an unknown ticket, 409 when the ticket
is not payable (already paid, expired, lost).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cashdesk.api.deps import get_draw_service, get_operator_id, get_payout_service
from cashdesk.api.schemas.tickets import PayoutRequest
from cashdesk.core.errors import ErrorKind
from cashdesk.core.models import PayoutResult
from cashdesk.services.draw_tickets import DrawTicketService
from cashdesk.services.payouts import PayoutService

router = APIRouter(prefix="/api/v1", tags=["payouts"])

_RESULT_STATUS: dict[ErrorKind | None, int] = {
    None: 200,
    ErrorKind.TICKET_NOT_FOUND: 404,
    ErrorKind.PAYOUT_NOT_ELIGIBLE: 409,
}


def _result_response(result: PayoutResult) -> JSONResponse:
    status = _RESULT_STATUS.get(result.error, 400)
    return JSONResponse(status_code=status, content=result.model_dump(mode="json"))


@router.post("/payouts", response_model=PayoutResult)
def process_payout(
    body: PayoutRequest,
    operator_id: str = Depends(get_operator_id),
    service: PayoutService = Depends(get_payout_service),
) -> JSONResponse:
    """Pay out a physical ticket in the requested mode."""
    return _result_response(service.process_payout(body.ticket_id, body.mode, operator_id))


@router.post("/draw-tickets/{ticket_number}/payout", response_model=PayoutResult)
def pay_draw_ticket(
    ticket_number: str,
    operator_id: str = Depends(get_operator_id),
    service: DrawTicketService = Depends(get_draw_service),
) -> JSONResponse:
    """Pay out a winning legacy draw ticket."""
    return _result_response(service.pay_out(ticket_number, operator_id))
