"""Ticket service: issuance, lookup with lazy expiry, and gameplay updates.

Together with :class:`~cashdesk.repositories.ticket_repository.TicketRepository`
this is the ticket store: the repository owns the records and the lock, this
service owns the lifecycle rules.

Expiry is evaluated lazily whenever a ticket is read. When it fires the
``expired`` status is persisted, so two reads never disagree.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from cashdesk.core.constants import (
    ALLOWED_TRANSITIONS,
    DEFAULT_CODE_MAX_ATTEMPTS,
    DEFAULT_TICKET_VALIDITY_HOURS,
    PLAYABLE_STATUSES,
    TERMINAL_STATUSES,
    ZERO,
    GameScope,
    TicketStatus,
    TicketType,
)
from cashdesk.core.errors import (
    CodeCollisionError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidCodeFormatError,
    InvalidScopeError,
    TicketInvariantError,
    TicketNotFoundError,
    TicketNotPlayableError,
)
from cashdesk.core.models import (
    CreateTicketParams,
    GameplayDelta,
    PhysicalTicket,
    TicketStats,
    to_money,
)
from cashdesk.repositories.base import DuplicateKeyError
from cashdesk.repositories.ticket_repository import TicketRepository
from cashdesk.services.codes import classify, generate_code, generate_ticket_id, normalize_code

logger = logging.getLogger(__name__)


def parse_amount(value: Any, field: str) -> Decimal:
    """Round *value* to cents, raising ``InvalidAmountError`` if it is not a usable amount."""
    try:
        amount = to_money(value)
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"{field} is not a valid amount (got {value})") from None
    if not amount.is_finite():
        raise InvalidAmountError(f"{field} is not a valid amount (got {value})")
    return amount


def transition(ticket: PhysicalTicket, target: TicketStatus, **changes: Any) -> PhysicalTicket:
    """Return a copy of *ticket* moved to *target*.

    Raises :class:`TicketInvariantError` for a move the lifecycle graph does
    not allow; callers check business preconditions first, so reaching this
    is a programming error.
    """
    if target not in ALLOWED_TRANSITIONS[ticket.status]:
        raise TicketInvariantError(
            ticket.ticket_id, f"illegal transition {ticket.status} -> {target}"
        )
    return ticket.model_copy(update={"status": target, **changes})


class TicketService:
    """Issues physical tickets and enforces their lifecycle."""

    def __init__(
        self,
        ticket_repo: TicketRepository,
        *,
        validity: timedelta = timedelta(hours=DEFAULT_TICKET_VALIDITY_HOURS),
        code_max_attempts: int = DEFAULT_CODE_MAX_ATTEMPTS,
    ) -> None:
        self.ticket_repo = ticket_repo
        self.validity = validity
        self.code_max_attempts = code_max_attempts

    # ── issuance ────────────────────────────────────────────────────

    def create_ticket(
        self,
        params: CreateTicketParams,
        *,
        now: datetime | None = None,
    ) -> PhysicalTicket:
        """Issue a new ticket in ``not_played`` with balance equal to the deposit.

        Validates:
          - amount is strictly positive
          - single-game scope names a game

        Regenerates the code on collision, up to ``code_max_attempts``.
        """
        if now is None:
            now = datetime.now(tz=UTC)

        amount = parse_amount(params.amount, "Deposit amount")
        if amount <= 0:
            raise InvalidAmountError(f"Deposit amount must be positive (got {amount})")

        if params.game_scope == GameScope.SINGLE and not params.game_id:
            raise InvalidScopeError("Single-game tickets require a game_id")

        single = params.game_scope == GameScope.SINGLE
        for attempt in range(1, self.code_max_attempts + 1):
            code = generate_code()
            if self.ticket_repo.code_exists(code):
                logger.warning("Code collision on attempt %d, regenerating", attempt)
                continue
            ticket = PhysicalTicket(
                ticket_id=generate_ticket_id(now),
                code=code,
                status=TicketStatus.NOT_PLAYED,
                deposit_amount=amount,
                remaining_balance=amount,
                total_winnings=ZERO,
                game_scope=params.game_scope,
                game_id=params.game_id if single else None,
                game_name=params.game_name if single else None,
                phone_number=params.phone_number or None,
                issued_at=now,
                expires_at=now + self.validity,
            )
            try:
                self.ticket_repo.create(ticket)
            except (CodeCollisionError, DuplicateKeyError):
                # Lost a race with a concurrent issuance
                logger.warning("Insert collision on attempt %d, regenerating", attempt)
                continue
            logger.info(
                "Issued ticket %s (%s) deposit=%s scope=%s",
                ticket.ticket_id,
                ticket.code,
                ticket.deposit_amount,
                ticket.game_scope,
            )
            return ticket

        raise CodeCollisionError(
            f"Could not allocate a unique ticket code after {self.code_max_attempts} attempts"
        )

    # ── lookup ──────────────────────────────────────────────────────

    def get_by_code(self, code: str, *, now: datetime | None = None) -> PhysicalTicket:
        """Find a ticket by its printed code (case and whitespace insensitive)."""
        normalized = normalize_code(code)
        if classify(normalized) != TicketType.QR:
            raise InvalidCodeFormatError(f"Not a QR ticket code: {normalized!r}")
        with self.ticket_repo.locked():
            ticket = self.ticket_repo.find_by_code(normalized)
            if ticket is None:
                raise TicketNotFoundError("Ticket not found", code=normalized)
            return self._refresh_expiry(ticket, now)

    def get_by_id(self, ticket_id: str, *, now: datetime | None = None) -> PhysicalTicket:
        with self.ticket_repo.locked():
            ticket = self.ticket_repo.find_by_id(ticket_id)
            if ticket is None:
                raise TicketNotFoundError("Ticket not found", ticket_id=ticket_id)
            return self._refresh_expiry(ticket, now)

    def list_tickets(
        self,
        *,
        status: TicketStatus | None = None,
        page: int = 1,
        limit: int = 20,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Paginated tickets with expiry applied, optionally filtered by status."""
        self.expire_due(now=now)
        filters: dict[str, Any] = {"status": status} if status is not None else {}
        total = self.ticket_repo.count(filters=filters)
        offset = (page - 1) * limit
        items = self.ticket_repo.find_all(limit=limit, offset=offset, filters=filters)
        total_pages = max(1, (total + limit - 1) // limit)
        return {
            "items": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total_items": total,
                "total_pages": total_pages,
            },
        }

    def get_stats(self, *, now: datetime | None = None) -> TicketStats:
        """Counts per status plus deposit and payout totals, for the reports page."""
        self.expire_due(now=now)
        tickets = self.ticket_repo.all()
        stats = TicketStats(
            total=len(tickets),
            total_deposits=sum((t.deposit_amount for t in tickets), ZERO),
            total_payouts=sum((t.paid_out_amount or ZERO for t in tickets), ZERO),
        )
        for status in TicketStatus:
            setattr(stats, status.value, self.ticket_repo.count_by_status(status))
        return stats

    def expire_due(self, *, now: datetime | None = None) -> int:
        """Persist ``expired`` on every ticket past its expiry. Returns how many moved."""
        expired = 0
        with self.ticket_repo.locked():
            for ticket in self.ticket_repo.all():
                if self._refresh_expiry(ticket, now) is not ticket:
                    expired += 1
        return expired

    # ── gameplay ────────────────────────────────────────────────────

    def apply_gameplay(
        self,
        ticket_id: str,
        delta: GameplayDelta,
        *,
        now: datetime | None = None,
    ) -> PhysicalTicket:
        """Apply one gameplay event atomically.

        The stake is debited from the remaining balance, winnings are
        credited, and the status moves along the lifecycle:
        ``not_played -> active`` on first play, then on ``finished``
        either ``finished_won`` (winnings > 0) or ``finished_lost``
        (no winnings, nothing left to play).
        """
        stake = parse_amount(delta.stake, "Stake")
        winnings = parse_amount(delta.winnings, "Winnings")
        if stake < 0 or winnings < 0:
            raise InvalidAmountError("Stake and winnings must be non-negative")

        with self.ticket_repo.locked():
            ticket = self.ticket_repo.find_by_id(ticket_id)
            if ticket is None:
                raise TicketNotFoundError("Ticket not found", ticket_id=ticket_id)
            ticket = self._refresh_expiry(ticket, now)

            if ticket.status not in PLAYABLE_STATUSES:
                raise TicketNotPlayableError(
                    f"Ticket is {ticket.status} and cannot be played",
                    status=ticket.status,
                )
            if stake > ticket.remaining_balance:
                raise InsufficientBalanceError(
                    f"Insufficient balance. Need {stake}, have {ticket.remaining_balance}"
                )

            updated = ticket
            if ticket.status == TicketStatus.NOT_PLAYED:
                if ticket.remaining_balance <= 0:
                    raise InsufficientBalanceError("Ticket has no balance to play")
                updated = transition(updated, TicketStatus.ACTIVE)

            updated = updated.model_copy(
                update={
                    "remaining_balance": to_money(updated.remaining_balance - stake),
                    "total_winnings": parse_amount(
                        updated.total_winnings + winnings, "Total winnings"
                    ),
                }
            )

            if delta.finished:
                if updated.total_winnings > 0:
                    updated = transition(updated, TicketStatus.FINISHED_WON)
                elif updated.remaining_balance == 0:
                    updated = transition(updated, TicketStatus.FINISHED_LOST)

            self.ticket_repo.replace(updated)

        if updated.status != ticket.status:
            logger.info("Ticket %s %s -> %s", ticket_id, ticket.status, updated.status)
        return updated

    # ── helpers ─────────────────────────────────────────────────────

    def _refresh_expiry(
        self, ticket: PhysicalTicket, now: datetime | None
    ) -> PhysicalTicket:
        """Persist the ``expired`` transition if it is due. Caller holds the lock."""
        if now is None:
            now = datetime.now(tz=UTC)
        if ticket.status in TERMINAL_STATUSES or not ticket.is_expired_at(now):
            return ticket
        expired = transition(ticket, TicketStatus.EXPIRED)
        self.ticket_repo.replace(expired)
        logger.info("Ticket %s expired (was %s)", ticket.ticket_id, ticket.status)
        return expired
