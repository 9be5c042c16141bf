"""Domain models for physical tickets, payouts and draw tickets.

All models are pydantic v2. ``PhysicalTicket`` is frozen: the store swaps
whole snapshots, so a caller holding one can never see it change.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, computed_field

from cashdesk.core.constants import (
    MONEY_QUANTUM,
    STATUS_LABELS,
    ZERO,
    DrawTicketStatus,
    DrawValidationStatus,
    GameScope,
    PayoutMode,
    TicketStatus,
    TicketType,
)
from cashdesk.core.errors import ErrorKind, TicketInvariantError


def to_money(value: Any) -> Decimal:
    """Coerce *value* to a cent-quantized Decimal."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


# Any money field: parsed as Decimal, then rounded to cents
Money = Annotated[Decimal, AfterValidator(to_money)]


class PhysicalTicket(BaseModel):
    """Prepaid QR ticket: deposit in, games played, cash out at the desk."""

    model_config = ConfigDict(frozen=True)

    ticket_id: str
    code: str
    status: TicketStatus
    deposit_amount: Money
    remaining_balance: Money
    total_winnings: Money = ZERO
    game_scope: GameScope = GameScope.ALL
    game_id: str | None = None
    game_name: str | None = None
    phone_number: str | None = None
    issued_at: datetime
    expires_at: datetime
    paid_out_at: datetime | None = None
    paid_out_by: str | None = None
    paid_out_amount: Money | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    def is_expired_at(self, now: datetime) -> bool:
        return now > self.expires_at


def check_ticket_invariants(ticket: PhysicalTicket) -> None:
    """Raise :class:`TicketInvariantError` if *ticket* is internally inconsistent."""
    tid = ticket.ticket_id
    for name in ("deposit_amount", "remaining_balance", "total_winnings"):
        if getattr(ticket, name) < 0:
            raise TicketInvariantError(tid, f"{name} is negative")
    if ticket.remaining_balance > ticket.deposit_amount:
        raise TicketInvariantError(tid, "remaining_balance exceeds deposit_amount")
    if ticket.expires_at <= ticket.issued_at:
        raise TicketInvariantError(tid, "expires_at is not after issued_at")
    if ticket.game_scope == GameScope.SINGLE and not ticket.game_id:
        raise TicketInvariantError(tid, "single-game ticket without game_id")

    payout_fields = (ticket.paid_out_at, ticket.paid_out_by, ticket.paid_out_amount)
    if ticket.status == TicketStatus.PAID_OUT:
        if any(f is None for f in payout_fields):
            raise TicketInvariantError(tid, "paid_out ticket with missing payout record")
        if ticket.paid_out_amount is not None and ticket.paid_out_amount < 0:
            raise TicketInvariantError(tid, "paid_out_amount is negative")
    elif any(f is not None for f in payout_fields):
        raise TicketInvariantError(tid, f"{ticket.status} ticket carries a payout record")


class CreateTicketParams(BaseModel):
    """Input for issuing a ticket. Amount rules are enforced by the service."""

    amount: Decimal
    game_scope: GameScope = GameScope.ALL
    game_id: str | None = None
    game_name: str | None = None
    phone_number: str | None = None


class GameplayDelta(BaseModel):
    """One gameplay event reported by the game backend."""

    stake: Decimal = ZERO
    winnings: Decimal = ZERO
    finished: bool = False


class PayoutCalculation(BaseModel):
    ticket: PhysicalTicket
    payout_mode: PayoutMode
    winnings_amount: Money
    balance_amount: Money
    total_payout: Money
    can_payout: bool
    reason: str | None = None


class PayoutResult(BaseModel):
    success: bool
    ticket: PhysicalTicket | None = None
    amount_paid: Money = ZERO
    error: ErrorKind | None = None
    message: str | None = None


class DrawTicket(BaseModel):
    """Read-only view of a legacy draw ticket held by the draw oracle."""

    ticket_number: str
    status: DrawTicketStatus
    win_amount: Money = ZERO
    game_name: str | None = None
    paid_out_by: str | None = None


class DrawValidation(BaseModel):
    ticket_number: str
    status: DrawValidationStatus
    win_amount: Money = ZERO
    game_name: str | None = None


class TicketLookup(BaseModel):
    """Result of scanning an arbitrary code at the payout screen."""

    code: str
    ticket_type: TicketType
    ticket: PhysicalTicket | None = None
    payout_preview: PayoutCalculation | None = None
    draw: DrawValidation | None = None


class TicketStats(BaseModel):
    total: int = 0
    not_played: int = 0
    active: int = 0
    finished_won: int = 0
    finished_lost: int = 0
    paid_out: int = 0
    expired: int = 0
    total_deposits: Money = ZERO
    total_payouts: Money = ZERO
