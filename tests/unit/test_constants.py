"""Tests for domain constants and the lifecycle table."""

from __future__ import annotations

from cashdesk.core.constants import (
    ALLOWED_TRANSITIONS,
    NON_PAYABLE_STATUSES,
    PLAYABLE_STATUSES,
    STATUS_LABELS,
    TERMINAL_STATUSES,
    TICKET_TYPE_LABELS,
    TicketStatus,
    TicketType,
)


class TestLifecycleTable:
    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(TicketStatus)

    def test_targets_are_statuses(self):
        for targets in ALLOWED_TRANSITIONS.values():
            assert targets <= set(TicketStatus)

    def test_no_self_transitions(self):
        for status, targets in ALLOWED_TRANSITIONS.items():
            assert status not in targets

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {TicketStatus.PAID_OUT, TicketStatus.EXPIRED}

    def test_nothing_returns_to_not_played(self):
        for targets in ALLOWED_TRANSITIONS.values():
            assert TicketStatus.NOT_PLAYED not in targets

    def test_finished_lost_cannot_be_paid(self):
        assert TicketStatus.PAID_OUT not in ALLOWED_TRANSITIONS[TicketStatus.FINISHED_LOST]

    def test_every_live_status_can_expire(self):
        for status in set(TicketStatus) - TERMINAL_STATUSES:
            assert TicketStatus.EXPIRED in ALLOWED_TRANSITIONS[status]

    def test_payable_statuses_can_reach_paid_out(self):
        for status in set(TicketStatus) - NON_PAYABLE_STATUSES:
            assert TicketStatus.PAID_OUT in ALLOWED_TRANSITIONS[status]

    def test_playable_statuses(self):
        assert PLAYABLE_STATUSES == {TicketStatus.NOT_PLAYED, TicketStatus.ACTIVE}


class TestLabels:
    def test_every_status_labelled(self):
        assert set(STATUS_LABELS) == set(TicketStatus)

    def test_every_ticket_type_labelled(self):
        assert set(TICKET_TYPE_LABELS) == set(TicketType)
