"""Ticket and payout request schemas."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from cashdesk.core.constants import GameScope, PayoutMode


class TicketCreate(BaseModel):
    """Schema for issuing a ticket.

    Amount is not range-checked here: the service rejects non-positive
    deposits with an ``invalid_amount`` problem response.
    """

    amount: Decimal
    game_scope: GameScope = GameScope.ALL
    game_id: str | None = Field(default=None, max_length=64)
    game_name: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)


class GameplayUpdate(BaseModel):
    """Gameplay event pushed by the game backend."""

    stake: Decimal = Decimal("0")
    winnings: Decimal = Decimal("0")
    finished: bool = False


class PayoutRequest(BaseModel):
    ticket_id: str = Field(min_length=1)
    mode: PayoutMode = PayoutMode.WINNINGS_PLUS_BALANCE


class TicketTypeResponse(BaseModel):
    code: str
    ticket_type: str
    label: str
