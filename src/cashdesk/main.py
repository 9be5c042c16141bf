"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cashdesk.api.middleware import setup_middleware
from cashdesk.core.config import Settings, get_settings
from cashdesk.core.logging import setup_logging
from cashdesk.repositories.ticket_repository import TicketRepository
from cashdesk.services.draw_tickets import (
    DrawTicketOracle,
    DrawTicketService,
    InMemoryDrawTicketOracle,
)
from cashdesk.services.fixtures import demo_draw_tickets, load_demo_tickets

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    ticket_repo: TicketRepository | None = None,
    draw_oracle: DrawTicketOracle | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Each application owns one ticket store. Pass *ticket_repo* or
    *draw_oracle* to share or substitute them (tests, embedding).
    """
    if settings is None:
        settings = get_settings()

    if not settings.is_testing:
        setup_logging(level=settings.log_level, log_format=settings.log_format)

    if ticket_repo is None:
        ticket_repo = TicketRepository()
    if draw_oracle is None:
        draw_oracle = InMemoryDrawTicketOracle(
            demo_draw_tickets() if settings.seed_demo_tickets else None
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting CashDesk API (env=%s)", settings.app_env)
        if settings.seed_demo_tickets:
            load_demo_tickets(app.state.ticket_repo)
        yield
        logger.info(
            "Shutting down CashDesk API (%d tickets in store)",
            app.state.ticket_repo.count(),
        )

    application = FastAPI(
        title="CashDesk API",
        description="Cashier terminal ticket issuance and payout API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.state.settings = settings
    application.state.ticket_repo = ticket_repo
    application.state.draw_oracle = draw_oracle
    application.state.draw_service = DrawTicketService(draw_oracle)

    setup_middleware(application)
    _register_routes(application)

    return application


def _register_routes(app: FastAPI) -> None:
    """Register all API route modules."""
    from cashdesk.api.routes.health import router as health_router
    from cashdesk.api.routes.lookup import router as lookup_router
    from cashdesk.api.routes.payouts import router as payouts_router
    from cashdesk.api.routes.tickets import router as tickets_router

    app.include_router(health_router, tags=["health"])
    app.include_router(tickets_router)
    app.include_router(payouts_router)
    app.include_router(lookup_router)


# Module-level app instance for uvicorn (uvicorn cashdesk.main:app)
app = create_app()
