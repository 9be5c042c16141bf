"""Tests for demo ticket fixtures."""

from __future__ import annotations

from decimal import Decimal

from cashdesk.core.constants import DrawValidationStatus, PayoutMode, TicketStatus
from cashdesk.core.models import check_ticket_invariants
from cashdesk.repositories.ticket_repository import TicketRepository
from cashdesk.services.draw_tickets import DrawTicketService, InMemoryDrawTicketOracle
from cashdesk.services.fixtures import demo_draw_tickets, demo_tickets, load_demo_tickets
from cashdesk.services.payouts import calculate_payout
from cashdesk.services.tickets import TicketService
from tests.conftest import NOW
from tests.factories.data_factories import build_ticket


class TestDemoTickets:
    def test_one_ticket_per_status(self):
        tickets = demo_tickets(NOW)
        assert {t.status for t in tickets} == set(TicketStatus)

    def test_all_consistent(self):
        for ticket in demo_tickets(NOW):
            check_ticket_invariants(ticket)

    def test_expiry_matches_status(self):
        for ticket in demo_tickets(NOW):
            assert ticket.is_expired_at(NOW) == (ticket.status == TicketStatus.EXPIRED)

    def test_active_demo_payouts(self):
        active = next(t for t in demo_tickets(NOW) if t.status == TicketStatus.ACTIVE)
        assert calculate_payout(active, PayoutMode.WINNINGS_ONLY).total_payout == Decimal("25.00")
        assert calculate_payout(active, PayoutMode.WINNINGS_PLUS_BALANCE).total_payout == (
            Decimal("60.00")
        )


class TestLoadDemoTickets:
    def test_loads_into_empty_store(self, ticket_repo: TicketRepository):
        assert load_demo_tickets(ticket_repo, NOW) == 6
        service = TicketService(ticket_repo)
        assert service.get_by_code("oct-testab12-n0pl", now=NOW).status == TicketStatus.NOT_PLAYED
        assert service.get_by_code("OCT-TESTKL12-EXPD", now=NOW).status == TicketStatus.EXPIRED

    def test_skips_non_empty_store(self, ticket_repo: TicketRepository):
        ticket_repo.create(build_ticket())
        assert load_demo_tickets(ticket_repo, NOW) == 0
        assert ticket_repo.count() == 1


class TestDemoDrawTickets:
    def test_one_of_each_outcome(self):
        service = DrawTicketService(InMemoryDrawTicketOracle(demo_draw_tickets()))
        statuses = [service.validate(t.ticket_number).status for t in demo_draw_tickets()]
        assert statuses == [
            DrawValidationStatus.VALID,
            DrawValidationStatus.INVALID,
            DrawValidationStatus.PAID,
        ]
