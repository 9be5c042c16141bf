"""Ticket repository: physical tickets keyed by id, with a unique code index."""

from __future__ import annotations

import logging

from cashdesk.core.constants import TicketStatus
from cashdesk.core.errors import CodeCollisionError, TicketInvariantError
from cashdesk.core.models import PhysicalTicket, check_ticket_invariants
from cashdesk.repositories.base import InMemoryRepository

logger = logging.getLogger(__name__)


class TicketRepository(InMemoryRepository[PhysicalTicket]):
    """Storage + domain queries for physical tickets.

    Tickets are never deleted; paid-out and expired records stay for audit.
    """

    def __init__(self) -> None:
        super().__init__(id_field="ticket_id")
        self._by_code: dict[str, str] = {}

    def _validate(self, record: PhysicalTicket) -> None:
        try:
            check_ticket_invariants(record)
        except TicketInvariantError:
            logger.critical("Refusing to store corrupt ticket %s", record.ticket_id)
            raise

    def _on_insert(self, record: PhysicalTicket) -> None:
        if record.code in self._by_code:
            raise CodeCollisionError(f"Code {record.code} already issued", code=record.code)
        self._by_code[record.code] = record.ticket_id

    def _on_replace(self, old: PhysicalTicket, new: PhysicalTicket) -> None:
        if old.code != new.code:
            raise TicketInvariantError(old.ticket_id, "ticket code is immutable")
        if old.status == TicketStatus.PAID_OUT and new != old:
            raise TicketInvariantError(old.ticket_id, "paid_out ticket modified")

    def code_exists(self, code: str) -> bool:
        with self._lock:
            return code in self._by_code

    def find_by_code(self, code: str) -> PhysicalTicket | None:
        """Exact match on an already-normalized code."""
        with self._lock:
            ticket_id = self._by_code.get(code)
            return None if ticket_id is None else self._records.get(ticket_id)

    def count_by_status(self, status: TicketStatus) -> int:
        return self.count(filters={"status": status})
