"""Dependency injection for FastAPI routes.

The ticket repository and draw oracle live on ``app.state`` (one store per
application instance); services are cheap wrappers built per request.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Query, Request

from cashdesk.core.config import Settings
from cashdesk.core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from cashdesk.repositories.ticket_repository import TicketRepository
from cashdesk.services.draw_tickets import DrawTicketService
from cashdesk.services.lookup import TicketLookupService
from cashdesk.services.payouts import PayoutService
from cashdesk.services.tickets import TicketService


def get_settings_dep(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_ticket_repo(request: Request) -> TicketRepository:
    repo: TicketRepository = request.app.state.ticket_repo
    return repo


def get_ticket_service(
    repo: TicketRepository = Depends(get_ticket_repo),
    settings: Settings = Depends(get_settings_dep),
) -> TicketService:
    return TicketService(
        repo,
        validity=settings.ticket_validity,
        code_max_attempts=settings.code_max_attempts,
    )


def get_payout_service(
    ticket_service: TicketService = Depends(get_ticket_service),
) -> PayoutService:
    return PayoutService(ticket_service)


def get_draw_service(request: Request) -> DrawTicketService:
    # Shared so its lock serializes draw payouts across requests
    service: DrawTicketService = request.app.state.draw_service
    return service


def get_lookup_service(
    ticket_service: TicketService = Depends(get_ticket_service),
    draw_service: DrawTicketService = Depends(get_draw_service),
) -> TicketLookupService:
    return TicketLookupService(ticket_service, draw_service)


@dataclass
class PaginationParams:
    """Pagination parameters parsed from query string."""

    page: int
    limit: int


def get_pagination(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT, description="Items per page"),
) -> PaginationParams:
    return PaginationParams(page=page, limit=limit)


# ── Operator identity ───────────────────────────────────────────────


def get_operator_id(
    x_operator_id: str | None = Header(default=None),
) -> str:
    """Operator who authorizes a payout.

    The terminal session is authenticated upstream (login + PIN); this
    service only requires the id to be present.
    """
    if not x_operator_id or not x_operator_id.strip():
        raise HTTPException(
            status_code=401,
            detail="Missing X-Operator-Id header",
        )
    return x_operator_id.strip()
