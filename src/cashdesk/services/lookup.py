"""Unified lookup for the payout screen: one input box, two ticket universes."""

from __future__ import annotations

import logging
from datetime import datetime

from cashdesk.core.constants import PayoutMode, TicketType
from cashdesk.core.errors import InvalidCodeFormatError
from cashdesk.core.models import TicketLookup
from cashdesk.services.codes import classify, normalize_code
from cashdesk.services.draw_tickets import DrawTicketService
from cashdesk.services.payouts import calculate_payout
from cashdesk.services.tickets import TicketService

logger = logging.getLogger(__name__)


class TicketLookupService:
    """Routes a scanned code to the physical ticket store or the draw oracle."""

    def __init__(self, ticket_service: TicketService, draw_service: DrawTicketService) -> None:
        self.ticket_service = ticket_service
        self.draw_service = draw_service

    def find_by_code(self, code: str, *, now: datetime | None = None) -> TicketLookup:
        """Classify *code* and resolve it.

        QR tickets come back with a ``winnings_plus_balance`` preview, the
        default mode on the payout screen. Raises ``InvalidCodeFormatError``
        for input that is neither kind and ``TicketNotFoundError`` for an
        unknown QR code. Unknown draw numbers are reported as ``invalid``.
        """
        normalized = normalize_code(code)
        ticket_type = classify(normalized)
        logger.debug("Lookup %s classified as %s", normalized, ticket_type)

        if ticket_type == TicketType.QR:
            ticket = self.ticket_service.get_by_code(normalized, now=now)
            return TicketLookup(
                code=normalized,
                ticket_type=ticket_type,
                ticket=ticket,
                payout_preview=calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE),
            )
        if ticket_type == TicketType.DRAW:
            return TicketLookup(
                code=normalized,
                ticket_type=ticket_type,
                draw=self.draw_service.validate(normalized),
            )
        raise InvalidCodeFormatError(
            "Invalid ticket format. Please check the code and try again.",
            code=normalized,
        )
