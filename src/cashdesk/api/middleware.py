"""API middleware and error handlers: CORS, correlation IDs, request logging, RFC 7807."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from cashdesk.core.context import set_correlation_id
from cashdesk.core.errors import TicketError, TicketInvariantError

logger = logging.getLogger(__name__)

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
}

HSTS_HEADER = "max-age=31536000; includeSubDomains"

ERROR_TITLES: dict[int, str] = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    500: "Internal Server Error",
}


def setup_middleware(app: FastAPI) -> None:
    """Attach middleware and exception handlers to the FastAPI app."""
    settings = getattr(app.state, "settings", None)
    is_prod = settings.is_production if settings else False

    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_get_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def correlation_and_logging(  # type: ignore[no-untyped-def]
        request: Request, call_next
    ):
        correlation_id = request.headers.get("x-correlation-id", uuid.uuid4().hex[:12])
        set_correlation_id(correlation_id)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{elapsed:.1f}ms"
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        if is_prod:
            response.headers["Strict-Transport-Security"] = HSTS_HEADER

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    @app.exception_handler(TicketError)
    async def ticket_error_handler(request: Request, exc: TicketError) -> JSONResponse:
        return rfc7807_error_response(
            status=exc.status_code,
            title=ERROR_TITLES.get(exc.status_code, "Error"),
            detail=exc.detail,
            instance=request.url.path,
            extra={"kind": str(exc.kind)},
        )

    @app.exception_handler(TicketInvariantError)
    async def invariant_error_handler(
        request: Request, exc: TicketInvariantError
    ) -> JSONResponse:
        logger.critical("Ticket invariant violated: %s", exc, exc_info=exc)
        return rfc7807_error_response(
            status=500,
            title=ERROR_TITLES[500],
            detail="Ticket data is inconsistent; payout halted",
            instance=request.url.path,
        )


def _get_cors_origins(settings: Any) -> list[str]:
    if settings is None:
        return ["*"]
    return list(settings.cors_origin_list)


def rfc7807_error_response(
    status: int,
    title: str,
    detail: str,
    type_uri: str = "about:blank",
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build an RFC 7807 Problem Details JSON response."""
    body: dict[str, Any] = {
        "type": type_uri,
        "title": title,
        "status": status,
        "detail": detail,
    }
    if instance:
        body["instance"] = instance
    if extra:
        body.update(extra)
    return JSONResponse(status_code=status, content=body)
