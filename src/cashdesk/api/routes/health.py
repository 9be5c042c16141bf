"""Health check routes: liveness and readiness."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from cashdesk.api.schemas.common import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> dict[str, Any]:
    """Application health check endpoint."""
    settings = getattr(request.app.state, "settings", None)
    repo = getattr(request.app.state, "ticket_repo", None)
    return {
        "status": "ok",
        "environment": settings.app_env if settings else "unknown",
        "tickets": repo.count() if repo is not None else 0,
    }


@router.get("/health/live")
def liveness_probe() -> dict[str, Any]:
    """Liveness probe: is the process alive and responding?"""
    return {"status": "alive"}


@router.get("/health/ready")
def readiness_probe(request: Request) -> Any:
    """Readiness probe: are the ticket store and draw oracle wired up?"""
    checks: dict[str, Any] = {
        "ticket_store": {
            "status": "ok" if getattr(request.app.state, "ticket_repo", None) else "missing"
        },
        "draw_oracle": {
            "status": "ok" if getattr(request.app.state, "draw_oracle", None) else "missing"
        },
    }
    ready = all(c["status"] == "ok" for c in checks.values())
    body = {"status": "ready" if ready else "not_ready", "checks": checks}
    if not ready:
        return JSONResponse(content=body, status_code=503)
    return body
