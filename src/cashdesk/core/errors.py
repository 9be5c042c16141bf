"""Ticket error hierarchy.

Business failures carry an :class:`ErrorKind` so callers can key operator
messages off the kind instead of parsing text. ``TicketInvariantError`` is
deliberately outside that hierarchy: it signals corrupted state and must
never be turned into a business result.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    INVALID_AMOUNT = "invalid_amount"
    INVALID_SCOPE = "invalid_scope"
    TICKET_NOT_FOUND = "ticket_not_found"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    PAYOUT_NOT_ELIGIBLE = "payout_not_eligible"
    CODE_COLLISION = "code_collision"
    INVALID_CODE_FORMAT = "invalid_code_format"
    TICKET_NOT_PLAYABLE = "ticket_not_playable"


class TicketError(Exception):
    """Ticket service error with HTTP status hint."""

    kind: ErrorKind
    default_status_code: int = 400

    def __init__(
        self,
        detail: str,
        status_code: int | None = None,
        **context: Any,
    ) -> None:
        self.detail = detail
        self.status_code = status_code or self.default_status_code
        self.context = context
        super().__init__(detail)


class InvalidAmountError(TicketError):
    kind = ErrorKind.INVALID_AMOUNT


class InvalidScopeError(TicketError):
    kind = ErrorKind.INVALID_SCOPE


class InvalidCodeFormatError(TicketError):
    kind = ErrorKind.INVALID_CODE_FORMAT


class TicketNotFoundError(TicketError):
    kind = ErrorKind.TICKET_NOT_FOUND
    default_status_code = 404


class InsufficientBalanceError(TicketError):
    kind = ErrorKind.INSUFFICIENT_BALANCE


class TicketNotPlayableError(TicketError):
    kind = ErrorKind.TICKET_NOT_PLAYABLE
    default_status_code = 409


class PayoutNotEligibleError(TicketError):
    """Payout refused; ``detail`` is the operator-facing reason."""

    kind = ErrorKind.PAYOUT_NOT_ELIGIBLE
    default_status_code = 409


class CodeCollisionError(TicketError):
    """Generated code already issued. Retried internally by the ticket service."""

    kind = ErrorKind.CODE_COLLISION
    default_status_code = 500


class TicketInvariantError(RuntimeError):
    """A stored ticket violates a lifecycle invariant (data corruption)."""

    def __init__(self, ticket_id: str, violation: str) -> None:
        self.ticket_id = ticket_id
        self.violation = violation
        super().__init__(f"Ticket {ticket_id} invariant violated: {violation}")
