"""Tests for the pure payout calculation."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from cashdesk.core.constants import PayoutMode, TicketStatus
from cashdesk.core.errors import TicketInvariantError
from cashdesk.services.payouts import calculate_payout
from tests.conftest import NOW
from tests.factories.data_factories import build_ticket

ISSUED = NOW - timedelta(hours=1)


class TestCalculatePayout:
    def test_active_ticket_both_modes(self):
        ticket = build_ticket(
            status=TicketStatus.ACTIVE,
            deposit_amount=Decimal("100"),
            remaining_balance=Decimal("35"),
            total_winnings=Decimal("25"),
            issued_at=ISSUED,
        )

        only = calculate_payout(ticket, PayoutMode.WINNINGS_ONLY)
        assert only.winnings_amount == Decimal("25.00")
        assert only.balance_amount == Decimal("0.00")
        assert only.total_payout == Decimal("25.00")
        assert only.can_payout is True

        both = calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE)
        assert both.winnings_amount == Decimal("25.00")
        assert both.balance_amount == Decimal("35.00")
        assert both.total_payout == Decimal("60.00")
        assert both.can_payout is True
        assert both.reason is None

    def test_not_played_refunds_deposit(self):
        ticket = build_ticket(deposit_amount=Decimal("50"), issued_at=ISSUED)
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE)
        assert calc.can_payout is True
        assert calc.total_payout == Decimal("50.00")

    def test_not_played_winnings_only_still_payable(self):
        ticket = build_ticket(deposit_amount=Decimal("50"), issued_at=ISSUED)
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_ONLY)
        assert calc.can_payout is True
        assert calc.total_payout == Decimal("0.00")

    def test_finished_won(self):
        ticket = build_ticket(
            status=TicketStatus.FINISHED_WON,
            deposit_amount=Decimal("20"),
            remaining_balance=Decimal("0"),
            total_winnings=Decimal("150"),
            issued_at=ISSUED,
        )
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE)
        assert calc.can_payout is True
        assert calc.total_payout == Decimal("150.00")

    def test_finished_lost_never_payable(self):
        ticket = build_ticket(
            status=TicketStatus.FINISHED_LOST,
            deposit_amount=Decimal("10"),
            remaining_balance=Decimal("0"),
            issued_at=ISSUED,
        )
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE)
        assert calc.can_payout is False
        assert calc.total_payout == Decimal("0.00")
        assert calc.reason == "No balance or winnings to pay out"

    def test_expired_not_payable(self):
        ticket = build_ticket(status=TicketStatus.EXPIRED, issued_at=ISSUED)
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE)
        assert calc.can_payout is False
        assert calc.total_payout == Decimal("0.00")
        assert "expired" in calc.reason

    def test_paid_out_reason_names_date(self):
        ticket = build_ticket(
            status=TicketStatus.PAID_OUT,
            issued_at=ISSUED,
            paid_out_at=NOW,
        )
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE)
        assert calc.can_payout is False
        assert calc.reason == "Ticket was already paid out on 2026-03-01"

    def test_paid_out_without_timestamp_is_invariant_error(self):
        ticket = build_ticket(status=TicketStatus.ACTIVE, issued_at=ISSUED)
        corrupt = ticket.model_copy(update={"status": TicketStatus.PAID_OUT})
        with pytest.raises(TicketInvariantError):
            calculate_payout(corrupt, PayoutMode.WINNINGS_ONLY)

    def test_active_with_nothing_to_pay(self):
        ticket = build_ticket(
            status=TicketStatus.ACTIVE,
            deposit_amount=Decimal("10"),
            remaining_balance=Decimal("0"),
            issued_at=ISSUED,
        )
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_PLUS_BALANCE)
        assert calc.can_payout is False
        assert calc.reason == "No amount to pay out"

    def test_active_winnings_only_with_no_winnings(self):
        ticket = build_ticket(
            status=TicketStatus.ACTIVE,
            deposit_amount=Decimal("10"),
            remaining_balance=Decimal("10"),
            issued_at=ISSUED,
        )
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_ONLY)
        assert calc.can_payout is False

    def test_echoes_ticket_and_mode(self):
        ticket = build_ticket(issued_at=ISSUED)
        calc = calculate_payout(ticket, PayoutMode.WINNINGS_ONLY)
        assert calc.ticket == ticket
        assert calc.payout_mode == PayoutMode.WINNINGS_ONLY

    def test_deterministic(self):
        ticket = build_ticket(
            status=TicketStatus.ACTIVE,
            deposit_amount=Decimal("100"),
            remaining_balance=Decimal("35"),
            total_winnings=Decimal("25"),
            issued_at=ISSUED,
        )
        for mode in PayoutMode:
            assert calculate_payout(ticket, mode) == calculate_payout(ticket, mode)
