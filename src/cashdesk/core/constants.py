"""Domain constants for CashDesk."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

# ── Ticket Statuses ─────────────────────────────────────────────────


class TicketStatus(StrEnum):
    """Lifecycle states of a physical ticket."""

    NOT_PLAYED = "not_played"
    ACTIVE = "active"
    FINISHED_WON = "finished_won"
    FINISHED_LOST = "finished_lost"
    PAID_OUT = "paid_out"
    EXPIRED = "expired"


# Every status must appear as a key; terminal states map to an empty set.
ALLOWED_TRANSITIONS: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.NOT_PLAYED: frozenset(
        {TicketStatus.ACTIVE, TicketStatus.EXPIRED, TicketStatus.PAID_OUT}
    ),
    TicketStatus.ACTIVE: frozenset(
        {
            TicketStatus.FINISHED_WON,
            TicketStatus.FINISHED_LOST,
            TicketStatus.EXPIRED,
            TicketStatus.PAID_OUT,
        }
    ),
    TicketStatus.FINISHED_WON: frozenset({TicketStatus.EXPIRED, TicketStatus.PAID_OUT}),
    TicketStatus.FINISHED_LOST: frozenset({TicketStatus.EXPIRED}),
    TicketStatus.PAID_OUT: frozenset(),
    TicketStatus.EXPIRED: frozenset(),
}

TERMINAL_STATUSES: frozenset[TicketStatus] = frozenset(
    s for s, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Statuses the payout calculator refuses outright, whatever the amounts
NON_PAYABLE_STATUSES: frozenset[TicketStatus] = frozenset(
    {TicketStatus.FINISHED_LOST, TicketStatus.PAID_OUT, TicketStatus.EXPIRED}
)

# Statuses that still accept gameplay deltas
PLAYABLE_STATUSES: frozenset[TicketStatus] = frozenset(
    {TicketStatus.NOT_PLAYED, TicketStatus.ACTIVE}
)

STATUS_LABELS: dict[TicketStatus, str] = {
    TicketStatus.NOT_PLAYED: "Not Played",
    TicketStatus.ACTIVE: "Active",
    TicketStatus.FINISHED_WON: "Winner!",
    TicketStatus.FINISHED_LOST: "No Winnings",
    TicketStatus.PAID_OUT: "Already Paid",
    TicketStatus.EXPIRED: "Expired",
}


# ── Scope & Payout Mode ─────────────────────────────────────────────


class GameScope(StrEnum):
    SINGLE = "single"
    ALL = "all"


class PayoutMode(StrEnum):
    """``winnings_only`` forfeits the unplayed balance."""

    WINNINGS_ONLY = "winnings_only"
    WINNINGS_PLUS_BALANCE = "winnings_plus_balance"


# ── Ticket Codes ────────────────────────────────────────────────────


class TicketType(StrEnum):
    QR = "qr"
    DRAW = "draw"
    UNKNOWN = "unknown"


TICKET_TYPE_LABELS: dict[TicketType, str] = {
    TicketType.QR: "QR Ticket",
    TicketType.DRAW: "Draw Ticket",
    TicketType.UNKNOWN: "Unknown",
}

QR_CODE_PREFIX = "OCT"
QR_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
QR_CODE_SEGMENTS: tuple[int, int] = (8, 4)

DRAW_TICKET_PREFIX = "0289"
DRAW_TICKET_SEGMENTS: tuple[int, int] = (10, 11)

TICKET_ID_PREFIX = "TKT"
TICKET_ID_SUFFIX_LENGTH = 4

# ── Draw Tickets ────────────────────────────────────────────────────


class DrawTicketStatus(StrEnum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    PAID = "paid"


class DrawValidationStatus(StrEnum):
    VALID = "valid"
    INVALID = "invalid"
    PAID = "paid"


# ── Money & Validity ────────────────────────────────────────────────
MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0.00")

DEFAULT_TICKET_VALIDITY_HOURS = 24
DEFAULT_CODE_MAX_ATTEMPTS = 10

# Large touch buttons on the new-ticket form
QUICK_AMOUNTS: list[int] = [5, 10, 15, 20, 25, 50, 100]

# ── Pagination ──────────────────────────────────────────────────────
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100
