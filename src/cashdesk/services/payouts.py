"""Payout service: payout calculation and at-most-once payout commit.

``calculate_payout`` is pure: same ticket snapshot and mode, same answer.
``PayoutService.process_payout`` is the only writer of the ``paid_out_*``
fields. It re-reads the ticket, recomputes eligibility and commits the
``paid_out`` transition inside one repository lock, so two cashier
stations scanning the same ticket cannot both pay it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from cashdesk.core.constants import NON_PAYABLE_STATUSES, ZERO, PayoutMode, TicketStatus
from cashdesk.core.errors import (
    PayoutNotEligibleError,
    TicketError,
    TicketInvariantError,
)
from cashdesk.core.models import PayoutCalculation, PayoutResult, PhysicalTicket
from cashdesk.services.tickets import TicketService, transition

logger = logging.getLogger(__name__)


def _ineligible_reason(ticket: PhysicalTicket) -> str:
    """Operator-facing reason for statuses that are never payable."""
    match ticket.status:
        case TicketStatus.PAID_OUT:
            if ticket.paid_out_at is None:
                raise TicketInvariantError(ticket.ticket_id, "paid_out without paid_out_at")
            return f"Ticket was already paid out on {ticket.paid_out_at.date().isoformat()}"
        case TicketStatus.EXPIRED:
            return "Ticket has expired and cannot be redeemed"
        case TicketStatus.FINISHED_LOST:
            return "No balance or winnings to pay out"
        case _:
            return "Ticket is not eligible for payout"


def calculate_payout(ticket: PhysicalTicket, mode: PayoutMode) -> PayoutCalculation:
    """Work out what the holder of *ticket* is owed under *mode*.

    A never-played ticket is always payable: the deposit is refunded. A
    finished-lost ticket is never payable, even though both may owe the
    same amount; the difference is refund versus forfeiture.
    """
    if ticket.status in NON_PAYABLE_STATUSES:
        return PayoutCalculation(
            ticket=ticket,
            payout_mode=mode,
            winnings_amount=ZERO,
            balance_amount=ZERO,
            total_payout=ZERO,
            can_payout=False,
            reason=_ineligible_reason(ticket),
        )

    winnings = ticket.total_winnings
    balance = ticket.remaining_balance if mode == PayoutMode.WINNINGS_PLUS_BALANCE else ZERO
    total = winnings + balance

    can_payout = ticket.status == TicketStatus.NOT_PLAYED or total > 0
    return PayoutCalculation(
        ticket=ticket,
        payout_mode=mode,
        winnings_amount=winnings,
        balance_amount=balance,
        total_payout=total,
        can_payout=can_payout,
        reason=None if can_payout else "No amount to pay out",
    )


class PayoutService:
    """Commits payouts for physical tickets."""

    def __init__(self, ticket_service: TicketService) -> None:
        self.ticket_service = ticket_service
        self.ticket_repo = ticket_service.ticket_repo

    def preview_payout(
        self,
        ticket_id: str,
        mode: PayoutMode,
        *,
        now: datetime | None = None,
    ) -> PayoutCalculation:
        """Calculation shown to the cashier before confirming."""
        ticket = self.ticket_service.get_by_id(ticket_id, now=now)
        return calculate_payout(ticket, mode)

    def process_payout(
        self,
        ticket_id: str,
        mode: PayoutMode,
        operator_id: str,
        *,
        now: datetime | None = None,
    ) -> PayoutResult:
        """Pay out a ticket at most once.

        Steps (all under the repository lock):
          1. Load the ticket, applying lazy expiry
          2. Recompute the payout for *mode*
          3. Refuse if not eligible
          4. Commit ``paid_out`` with timestamp, operator and amount

        Business failures come back as ``PayoutResult(success=False)`` with
        the ticket untouched. Invariant violations propagate.
        """
        if not operator_id or not operator_id.strip():
            raise ValueError("operator_id is required")
        if now is None:
            now = datetime.now(tz=UTC)

        try:
            with self.ticket_repo.locked():
                ticket = self.ticket_service.get_by_id(ticket_id, now=now)
                calculation = calculate_payout(ticket, mode)
                if not calculation.can_payout:
                    raise PayoutNotEligibleError(
                        calculation.reason or "Ticket is not eligible for payout",
                        status=ticket.status,
                    )
                if calculation.total_payout == 0:
                    logger.warning(
                        "Ticket %s paid out with zero amount (%s, status %s); deposit forfeited",
                        ticket_id,
                        mode,
                        ticket.status,
                    )
                paid = transition(
                    ticket,
                    TicketStatus.PAID_OUT,
                    paid_out_at=now,
                    paid_out_by=operator_id,
                    paid_out_amount=calculation.total_payout,
                )
                self.ticket_repo.replace(paid)
        except TicketError as e:
            logger.warning(
                "Payout refused for ticket %s by %s: %s (%s)",
                ticket_id,
                operator_id,
                e.detail,
                e.kind,
            )
            return PayoutResult(
                success=False,
                ticket=self.ticket_repo.find_by_id(ticket_id),
                error=e.kind,
                message=e.detail,
            )

        logger.info(
            "Paid out ticket %s: %s (%s) by operator %s",
            ticket_id,
            calculation.total_payout,
            mode,
            operator_id,
        )
        return PayoutResult(success=True, ticket=paid, amount_paid=calculation.total_payout)
