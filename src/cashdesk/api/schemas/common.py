"""Shared response schemas."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total_items: int
    total_pages: int


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    pagination: PaginationMeta


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details, plus the ticket error ``kind``."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    kind: str | None = None
    instance: str | None = None


class HealthResponse(BaseModel):
    status: str
    environment: str
    tickets: int
