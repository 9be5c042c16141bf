"""Demo tickets: one per lifecycle state, for training terminals and manual QA."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

from cashdesk.core.constants import DrawTicketStatus, GameScope, TicketStatus
from cashdesk.core.errors import CodeCollisionError
from cashdesk.core.models import DrawTicket, PhysicalTicket
from cashdesk.repositories.base import DuplicateKeyError
from cashdesk.repositories.ticket_repository import TicketRepository

logger = logging.getLogger(__name__)

DEMO_OPERATOR_ID = "OP-DEMO"


def _ticket(now: datetime, issued_hours_ago: int, **fields: Any) -> PhysicalTicket:
    issued_at = now - timedelta(hours=issued_hours_ago)
    data: dict[str, Any] = {
        "issued_at": issued_at,
        "expires_at": issued_at + timedelta(hours=24),
        "game_scope": GameScope.ALL,
        **fields,
    }
    return PhysicalTicket(**data)


def demo_tickets(now: datetime | None = None) -> list[PhysicalTicket]:
    """Six demo tickets, timestamps relative to *now*."""
    if now is None:
        now = datetime.now(tz=UTC)
    return [
        _ticket(
            now, 2,
            ticket_id="TKT-MOCK001", code="OCT-TESTAB12-N0PL",
            status=TicketStatus.NOT_PLAYED,
            deposit_amount=Decimal("50"), remaining_balance=Decimal("50"),
        ),
        _ticket(
            now, 3,
            ticket_id="TKT-MOCK002", code="OCT-TESTCD34-ACTV",
            status=TicketStatus.ACTIVE,
            deposit_amount=Decimal("100"), remaining_balance=Decimal("35"),
            total_winnings=Decimal("25"),
        ),
        _ticket(
            now, 5,
            ticket_id="TKT-MOCK003", code="OCT-TESTEF56-WINN",
            status=TicketStatus.FINISHED_WON,
            deposit_amount=Decimal("20"), remaining_balance=Decimal("0"),
            total_winnings=Decimal("150"),
            game_scope=GameScope.SINGLE, game_id="lucky-7", game_name="Lucky 7",
        ),
        _ticket(
            now, 6,
            ticket_id="TKT-MOCK004", code="OCT-TESTGH78-LOST",
            status=TicketStatus.FINISHED_LOST,
            deposit_amount=Decimal("10"), remaining_balance=Decimal("0"),
        ),
        _ticket(
            now, 8,
            ticket_id="TKT-MOCK005", code="OCT-TESTIJ90-PAID",
            status=TicketStatus.PAID_OUT,
            deposit_amount=Decimal("30"), remaining_balance=Decimal("12"),
            total_winnings=Decimal("45"),
            paid_out_at=now - timedelta(hours=1), paid_out_by=DEMO_OPERATOR_ID,
            paid_out_amount=Decimal("57"),
        ),
        _ticket(
            now, 30,
            ticket_id="TKT-MOCK006", code="OCT-TESTKL12-EXPD",
            status=TicketStatus.EXPIRED,
            deposit_amount=Decimal("25"), remaining_balance=Decimal("25"),
        ),
    ]


def demo_draw_tickets() -> list[DrawTicket]:
    """Fixed draw results: one winner, one loser, one already paid."""
    return [
        DrawTicket(
            ticket_number="0289-2397122442-00028362302",
            status=DrawTicketStatus.WON,
            win_amount=Decimal("40"),
            game_name="Mega Draw",
        ),
        DrawTicket(
            ticket_number="0289-1000000001-00000000001",
            status=DrawTicketStatus.LOST,
            game_name="Mega Draw",
        ),
        DrawTicket(
            ticket_number="0289-1000000002-00000000002",
            status=DrawTicketStatus.PAID,
            win_amount=Decimal("15"),
            game_name="Daily Pick",
        ),
    ]


def load_demo_tickets(ticket_repo: TicketRepository, now: datetime | None = None) -> int:
    """Load demo tickets into an empty repository. Returns how many were loaded."""
    if ticket_repo.count() > 0:
        logger.info("Ticket store not empty, skipping demo tickets")
        return 0
    loaded = 0
    for ticket in demo_tickets(now):
        try:
            ticket_repo.create(ticket)
        except (CodeCollisionError, DuplicateKeyError):
            logger.warning("Demo ticket %s already present", ticket.ticket_id)
            continue
        loaded += 1
    logger.info("Loaded %d demo tickets", loaded)
    return loaded
