"""Tests for /api/v1/payouts and draw ticket payout endpoints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from fastapi.testclient import TestClient

from cashdesk.core.constants import TicketStatus
from cashdesk.repositories.ticket_repository import TicketRepository
from tests.factories.data_factories import build_ticket

WINNER = "0289-2397122442-00028362302"


class TestTicketPayout:
    def test_requires_operator(self, client: TestClient, ticket_repo: TicketRepository) -> None:
        ticket = build_ticket()
        ticket_repo.create(ticket)
        resp = client.post("/api/v1/payouts", json={"ticket_id": ticket.ticket_id})
        assert resp.status_code == 401
        resp = client.post(
            "/api/v1/payouts",
            json={"ticket_id": ticket.ticket_id},
            headers={"X-Operator-Id": "  "},
        )
        assert resp.status_code == 401
        assert ticket_repo.find_by_id(ticket.ticket_id) == ticket

    def test_pay_then_refuse(
        self, client: TestClient, ticket_repo: TicketRepository, operator_headers: dict
    ) -> None:
        ticket = build_ticket(
            status=TicketStatus.ACTIVE,
            deposit_amount=Decimal("100"),
            remaining_balance=Decimal("35"),
            total_winnings=Decimal("25"),
        )
        ticket_repo.create(ticket)
        body = {"ticket_id": ticket.ticket_id, "mode": "winnings_plus_balance"}

        first = client.post("/api/v1/payouts", json=body, headers=operator_headers)
        assert first.status_code == 200
        data = first.json()
        assert data["success"] is True
        assert data["amount_paid"] == "60.00"
        assert data["error"] is None
        assert data["ticket"]["status"] == "paid_out"
        assert data["ticket"]["paid_out_by"] == "OP-0042"

        second = client.post("/api/v1/payouts", json=body, headers=operator_headers)
        assert second.status_code == 409
        data = second.json()
        assert data["success"] is False
        assert data["error"] == "payout_not_eligible"
        assert data["amount_paid"] == "0.00"
        assert "already paid out" in data["message"]

    def test_winnings_only(
        self, client: TestClient, ticket_repo: TicketRepository, operator_headers: dict
    ) -> None:
        ticket = build_ticket(
            status=TicketStatus.ACTIVE,
            deposit_amount=Decimal("100"),
            remaining_balance=Decimal("35"),
            total_winnings=Decimal("25"),
        )
        ticket_repo.create(ticket)
        resp = client.post(
            "/api/v1/payouts",
            json={"ticket_id": ticket.ticket_id, "mode": "winnings_only"},
            headers=operator_headers,
        )
        assert resp.json()["amount_paid"] == "25.00"

    def test_unknown_ticket_404(self, client: TestClient, operator_headers: dict) -> None:
        resp = client.post(
            "/api/v1/payouts", json={"ticket_id": "TKT-NOPE"}, headers=operator_headers
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "ticket_not_found"

    def test_expired_ticket_409(
        self, client: TestClient, ticket_repo: TicketRepository, operator_headers: dict
    ) -> None:
        ticket = build_ticket(issued_at=datetime.now(UTC) - timedelta(hours=30))
        ticket_repo.create(ticket)
        resp = client.post(
            "/api/v1/payouts", json={"ticket_id": ticket.ticket_id}, headers=operator_headers
        )
        assert resp.status_code == 409
        assert resp.json()["ticket"]["status"] == "expired"

    def test_bad_mode_422(self, client: TestClient, operator_headers: dict) -> None:
        resp = client.post(
            "/api/v1/payouts",
            json={"ticket_id": "TKT-1", "mode": "everything"},
            headers=operator_headers,
        )
        assert resp.status_code == 422


class TestDrawTicketPayout:
    def test_pay_winner_once(self, client: TestClient, operator_headers: dict) -> None:
        url = f"/api/v1/draw-tickets/{WINNER}/payout"
        first = client.post(url, headers=operator_headers)
        assert first.status_code == 200
        assert first.json()["amount_paid"] == "40.00"

        second = client.post(url, headers=operator_headers)
        assert second.status_code == 409
        assert second.json()["error"] == "payout_not_eligible"

    def test_unknown_draw_ticket(self, client: TestClient, operator_headers: dict) -> None:
        resp = client.post(
            "/api/v1/draw-tickets/0289-9999999999-99999999999/payout", headers=operator_headers
        )
        assert resp.status_code == 404

    def test_requires_operator(self, client: TestClient) -> None:
        assert client.post(f"/api/v1/draw-tickets/{WINNER}/payout").status_code == 401
