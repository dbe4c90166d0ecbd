import asyncio

import pytest

from src.config import ActivityAction, Priority, TicketStatus
from src.sla.application import SlaEscalationService
from src.sla.domain import EscalationPolicy
from tests.conftest import NOW, RecordingSearchIndex, days_ago, make_ticket


@pytest.fixture
def service(ticket_repo, search_index):
    return SlaEscalationService(ticket_repo, search_index)


def _run(service, **kwargs):
    return asyncio.run(service.escalate_overdue_tickets(now=NOW, **kwargs))


def test_policy_thresholds_are_inclusive():
    assert EscalationPolicy.evaluate(Priority.LOW, 6) is None
    assert EscalationPolicy.evaluate(Priority.LOW, 7).to_priority == Priority.MEDIUM
    assert EscalationPolicy.evaluate(Priority.MEDIUM, 2) is None
    assert EscalationPolicy.evaluate(Priority.MEDIUM, 3).to_priority == Priority.HIGH
    assert EscalationPolicy.evaluate(Priority.HIGH, 100) is None
    assert EscalationPolicy.evaluate(None, 100) is None


def test_days_are_truncated():
    assert EscalationPolicy.days_since(days_ago(6.99), NOW) == 6


def test_low_escalates_after_seven_days(service, ticket_repo, search_index):
    old = ticket_repo.seed(make_ticket(priority=Priority.LOW, created_at=days_ago(7)))
    young = ticket_repo.seed(make_ticket(priority=Priority.LOW, created_at=days_ago(6)))

    result = _run(service)

    assert result.scanned_count == 2
    assert result.escalated_count == 1
    escalated = ticket_repo.tickets[old.id]
    assert escalated.priority == Priority.MEDIUM
    assert escalated.updated_at == NOW
    activity = escalated.activities[-1]
    assert activity.action == ActivityAction.SLA_ESCALATION
    assert activity.actor_id == "SYSTEM"
    assert activity.details == (
        "SLA breach: LOW priority ticket not closed within 7 days. "
        "Priority escalated from LOW to MEDIUM"
    )
    assert ticket_repo.tickets[young.id].priority == Priority.LOW
    assert search_index.indexed == [old.id]


def test_medium_escalates_after_three_days(service, ticket_repo):
    ticket = ticket_repo.seed(make_ticket(priority=Priority.MEDIUM, created_at=days_ago(3)))
    _run(service)
    assert ticket_repo.tickets[ticket.id].priority == Priority.HIGH


def test_one_step_per_run(service, ticket_repo):
    ticket = ticket_repo.seed(make_ticket(priority=Priority.LOW, created_at=days_ago(10)))

    _run(service)
    assert ticket_repo.tickets[ticket.id].priority == Priority.MEDIUM

    _run(service)
    assert ticket_repo.tickets[ticket.id].priority == Priority.HIGH

    result = _run(service)
    assert result.escalated_count == 0
    assert ticket_repo.tickets[ticket.id].priority == Priority.HIGH


def test_closed_and_unprioritized_tickets_untouched(service, ticket_repo):
    closed = ticket_repo.seed(make_ticket(
        priority=Priority.LOW, status=TicketStatus.RESOLVED, created_at=days_ago(30)
    ))
    unprioritized = ticket_repo.seed(make_ticket(created_at=days_ago(30)))

    result = _run(service)

    assert result.scanned_count == 1
    assert result.escalated_count == 0
    assert ticket_repo.tickets[closed.id].priority == Priority.LOW
    assert ticket_repo.tickets[unprioritized.id].priority is None


def test_failure_on_one_ticket_does_not_stop_run(service, ticket_repo):
    broken = ticket_repo.seed(make_ticket(priority=Priority.MEDIUM, created_at=days_ago(5)))
    fine = ticket_repo.seed(make_ticket(priority=Priority.MEDIUM, created_at=days_ago(4)))
    ticket_repo.fail_on_save.add(broken.id)

    result = _run(service)

    assert result.failed_count == 1
    assert result.escalated_count == 1
    assert ticket_repo.tickets[fine.id].priority == Priority.HIGH


def test_index_failure_does_not_fail_escalation(ticket_repo):
    service = SlaEscalationService(ticket_repo, RecordingSearchIndex(fail=True))
    ticket = ticket_repo.seed(make_ticket(priority=Priority.MEDIUM, created_at=days_ago(5)))

    result = _run(service)

    assert result.escalated_count == 1
    assert result.failed_count == 0
    assert ticket_repo.tickets[ticket.id].priority == Priority.HIGH


def test_stop_signal_ends_run_between_tickets(service, ticket_repo):
    for i in range(3):
        ticket_repo.seed(make_ticket(priority=Priority.MEDIUM, created_at=days_ago(10 - i)))

    calls = []

    def should_stop():
        calls.append(1)
        return len(calls) > 1

    result = _run(service, should_stop=should_stop)

    assert result.stopped_early is True
    assert result.scanned_count == 1
    assert result.escalated_count == 1
