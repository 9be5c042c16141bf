"""Shared pytest fixtures and test configuration."""

from __future__ import annotations

import os
import sys
from datetime import UTC, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Ensure src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
os.environ.setdefault("CASHDESK_APP_ENV", "testing")

from cashdesk.core.config import Settings  # noqa: E402
from cashdesk.repositories.ticket_repository import TicketRepository  # noqa: E402
from cashdesk.services.draw_tickets import (  # noqa: E402
    DrawTicketService,
    InMemoryDrawTicketOracle,
)
from cashdesk.services.fixtures import demo_draw_tickets  # noqa: E402
from cashdesk.services.payouts import PayoutService  # noqa: E402
from cashdesk.services.tickets import TicketService  # noqa: E402

NOW = datetime(2026, 3, 1, 17, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def ticket_repo() -> TicketRepository:
    return TicketRepository()


@pytest.fixture
def ticket_service(ticket_repo: TicketRepository) -> TicketService:
    return TicketService(ticket_repo)


@pytest.fixture
def payout_service(ticket_service: TicketService) -> PayoutService:
    return PayoutService(ticket_service)


@pytest.fixture
def draw_oracle() -> InMemoryDrawTicketOracle:
    return InMemoryDrawTicketOracle(demo_draw_tickets())


@pytest.fixture
def draw_service(draw_oracle: InMemoryDrawTicketOracle) -> DrawTicketService:
    return DrawTicketService(draw_oracle)


# ── HTTP ─────────────────────────────────────────────────────────────


@pytest.fixture
def app(ticket_repo: TicketRepository, draw_oracle: InMemoryDrawTicketOracle) -> FastAPI:
    """FastAPI app sharing the test's ticket repository and draw oracle."""
    from cashdesk.main import create_app

    settings = Settings(app_env="testing", _env_file=None)
    return create_app(settings=settings, ticket_repo=ticket_repo, draw_oracle=draw_oracle)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def operator_headers() -> dict[str, str]:
    return {"X-Operator-Id": "OP-0042"}
