"""Draw tickets: validation and payout of legacy numeric tickets.

Whether a draw ticket won is decided by an authoritative draw-result
service, reached through the :class:`DrawTicketOracle` protocol. This
module never decides a result on its own.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Protocol

from cashdesk.core.constants import ZERO, DrawTicketStatus, DrawValidationStatus
from cashdesk.core.errors import ErrorKind
from cashdesk.core.models import DrawTicket, DrawValidation, PayoutResult, to_money
from cashdesk.services.codes import normalize_draw_number

logger = logging.getLogger(__name__)


class DrawTicketOracle(Protocol):
    """Authoritative source of draw ticket results."""

    def find(self, ticket_number: str) -> DrawTicket | None:
        """Look up a ticket by its digits-only number."""
        ...

    def mark_paid(self, ticket_number: str, amount: Decimal, operator_id: str) -> bool:
        """Compare-and-set ``won -> paid``. False if the ticket was not payable."""
        ...


class InMemoryDrawTicketOracle:
    """Fixed registry of draw results for development terminals and tests."""

    def __init__(self, tickets: list[DrawTicket] | None = None) -> None:
        self._lock = threading.Lock()
        self._tickets: dict[str, DrawTicket] = {}
        for ticket in tickets or []:
            self.register(ticket)

    def register(self, ticket: DrawTicket) -> None:
        with self._lock:
            self._tickets[normalize_draw_number(ticket.ticket_number)] = ticket

    def find(self, ticket_number: str) -> DrawTicket | None:
        with self._lock:
            return self._tickets.get(normalize_draw_number(ticket_number))

    def mark_paid(self, ticket_number: str, amount: Decimal, operator_id: str) -> bool:
        key = normalize_draw_number(ticket_number)
        with self._lock:
            ticket = self._tickets.get(key)
            if ticket is None or ticket.status != DrawTicketStatus.WON:
                return False
            self._tickets[key] = ticket.model_copy(
                update={
                    "status": DrawTicketStatus.PAID,
                    "win_amount": to_money(amount),
                    "paid_out_by": operator_id,
                }
            )
            return True


class DrawTicketService:
    """Validates draw tickets and pays winners through the oracle."""

    def __init__(self, oracle: DrawTicketOracle) -> None:
        self.oracle = oracle
        self._lock = threading.Lock()

    def validate(self, ticket_number: str) -> DrawValidation:
        """Map the oracle's view onto what the payout screen shows."""
        ticket = self.oracle.find(normalize_draw_number(ticket_number))
        if ticket is None:
            return DrawValidation(ticket_number=ticket_number, status=DrawValidationStatus.INVALID)

        if ticket.status == DrawTicketStatus.PAID:
            status = DrawValidationStatus.PAID
        elif ticket.status == DrawTicketStatus.WON and ticket.win_amount > 0:
            status = DrawValidationStatus.VALID
        else:
            status = DrawValidationStatus.INVALID

        return DrawValidation(
            ticket_number=ticket.ticket_number,
            status=status,
            win_amount=ticket.win_amount if status == DrawValidationStatus.VALID else ZERO,
            game_name=ticket.game_name,
        )

    def pay_out(self, ticket_number: str, operator_id: str) -> PayoutResult:
        """Pay a winning draw ticket once. Failures come back as results."""
        if not operator_id or not operator_id.strip():
            raise ValueError("operator_id is required")

        with self._lock:
            if self.oracle.find(normalize_draw_number(ticket_number)) is None:
                return PayoutResult(
                    success=False,
                    error=ErrorKind.TICKET_NOT_FOUND,
                    message="Draw ticket not found",
                )
            validation = self.validate(ticket_number)
            if validation.status != DrawValidationStatus.VALID:
                message = (
                    "Draw ticket was already paid"
                    if validation.status == DrawValidationStatus.PAID
                    else "Draw ticket has no winnings to pay"
                )
                logger.warning("Draw payout refused for %s: %s", ticket_number, message)
                return PayoutResult(
                    success=False,
                    error=ErrorKind.PAYOUT_NOT_ELIGIBLE,
                    message=message,
                )
            if not self.oracle.mark_paid(
                normalize_draw_number(ticket_number), validation.win_amount, operator_id
            ):
                logger.warning("Draw ticket %s changed state during payout", ticket_number)
                return PayoutResult(
                    success=False,
                    error=ErrorKind.PAYOUT_NOT_ELIGIBLE,
                    message="Draw ticket was already paid",
                )

        logger.info(
            "Paid out draw ticket %s: %s by operator %s",
            ticket_number,
            validation.win_amount,
            operator_id,
        )
        return PayoutResult(success=True, amount_paid=validation.win_amount)
