"""Ticket codes: generation of QR ticket codes and classification of scanned input.

Two disjoint universes share the payout screen:

* QR tickets: ``OCT-XXXXXXXX-XXXX`` (A-Z, 0-9), printed on the receipt.
* Draw tickets: ``0289-DDDDDDDDDD-DDDDDDDDDDD`` (digits), legacy numbers.

Codes are generated with :mod:`secrets`; the ticket repository still
rejects duplicates at insert time.
"""

from __future__ import annotations

import re
import secrets
from datetime import UTC, datetime
from typing import Any

from cashdesk.core.constants import (
    DRAW_TICKET_PREFIX,
    DRAW_TICKET_SEGMENTS,
    QR_CODE_ALPHABET,
    QR_CODE_PREFIX,
    QR_CODE_SEGMENTS,
    TICKET_ID_PREFIX,
    TICKET_ID_SUFFIX_LENGTH,
    TICKET_TYPE_LABELS,
    TicketType,
)

QR_TICKET_PATTERN = re.compile(
    rf"^{QR_CODE_PREFIX}-[A-Z0-9]{{{QR_CODE_SEGMENTS[0]}}}-[A-Z0-9]{{{QR_CODE_SEGMENTS[1]}}}$"
)
DRAW_TICKET_PATTERN = re.compile(
    rf"^{DRAW_TICKET_PREFIX}-[0-9]{{{DRAW_TICKET_SEGMENTS[0]}}}-[0-9]{{{DRAW_TICKET_SEGMENTS[1]}}}$"
)

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _random_segment(length: int) -> str:
    return "".join(secrets.choice(QR_CODE_ALPHABET) for _ in range(length))


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_code() -> str:
    """Return a fresh QR ticket code, e.g. ``OCT-AB12CD34-EF56``."""
    segments = [_random_segment(n) for n in QR_CODE_SEGMENTS]
    return "-".join([QR_CODE_PREFIX, *segments])


def generate_ticket_id(now: datetime | None = None) -> str:
    """Return an opaque ticket id: ``TKT-<base36 epoch millis>-<4 random>``."""
    if now is None:
        now = datetime.now(tz=UTC)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(TICKET_ID_SUFFIX_LENGTH))
    return f"{TICKET_ID_PREFIX}-{_to_base36(millis)}-{suffix}"


def normalize_code(raw: str) -> str:
    """Trim whitespace and uppercase, the form codes are stored and matched in."""
    return raw.strip().upper()


def classify(raw: Any) -> TicketType:
    """Classify scanned or typed input as a QR ticket, a draw ticket, or neither.

    Never raises. Non-string input and truncated codes are ``unknown``.
    """
    if not isinstance(raw, str):
        return TicketType.UNKNOWN
    code = normalize_code(raw)
    if QR_TICKET_PATTERN.fullmatch(code):
        return TicketType.QR
    if DRAW_TICKET_PATTERN.fullmatch(code):
        return TicketType.DRAW
    return TicketType.UNKNOWN


def normalize_draw_number(raw: str) -> str:
    """Digits only; draw numbers are matched regardless of hyphenation."""
    return re.sub(r"[^0-9]", "", raw)


def ticket_type_label(ticket_type: TicketType) -> str:
    return TICKET_TYPE_LABELS[ticket_type]
