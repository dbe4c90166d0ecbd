import pytest

from src.config import ActivityAction, Role, TicketStatus
from src.core import ForbiddenException, InvalidTransitionException
from src.tickets.domain import TicketStateMachine, User
from tests.conftest import NOW, make_ticket


AGENT = User(id="agent1", name="Alex Agent", email="alex@example.com", role=Role.AGENT)
OTHER = User(id="agent2", name="Blair Agent", email="blair@example.com", role=Role.AGENT)


@pytest.mark.parametrize("current,new", [
    (TicketStatus.NOT_STARTED, TicketStatus.IN_PROGRESS),
    (TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED),
    (TicketStatus.IN_PROGRESS, TicketStatus.INVALID),
])
def test_legal_transitions(current, new):
    assert TicketStateMachine.is_valid_transition(current, new)


@pytest.mark.parametrize("current,new", [
    (TicketStatus.NOT_STARTED, TicketStatus.RESOLVED),
    (TicketStatus.NOT_STARTED, TicketStatus.INVALID),
    (TicketStatus.IN_PROGRESS, TicketStatus.NOT_STARTED),
    (TicketStatus.RESOLVED, TicketStatus.IN_PROGRESS),
    (TicketStatus.INVALID, TicketStatus.RESOLVED),
])
def test_illegal_transitions_rejected(current, new):
    assert not TicketStateMachine.is_valid_transition(current, new)
    with pytest.raises(InvalidTransitionException):
        TicketStateMachine.validate_transition(current, new)


def test_same_status_is_rejected():
    with pytest.raises(InvalidTransitionException) as exc:
        TicketStateMachine.validate_transition(TicketStatus.IN_PROGRESS, TicketStatus.IN_PROGRESS)
    assert "already in IN_PROGRESS" in exc.value.message


def test_transition_appends_activity_and_stamps_closed_at():
    ticket = make_ticket(agent=AGENT)

    TicketStateMachine.transition(ticket, TicketStatus.IN_PROGRESS, AGENT, now=NOW)
    assert ticket.closed_at is None

    TicketStateMachine.transition(ticket, TicketStatus.RESOLVED, AGENT, now=NOW)
    assert ticket.status == TicketStatus.RESOLVED
    assert ticket.closed_at == NOW
    assert ticket.updated_at == NOW
    assert [a.action for a in ticket.activities] == [ActivityAction.STATUS_CHANGED] * 2
    assert ticket.activities[-1].details == "Status changed from IN_PROGRESS to RESOLVED"
    assert ticket.activities[-1].actor_id == AGENT.id


def test_only_assigned_agent_may_transition():
    ticket = make_ticket(agent=AGENT)
    with pytest.raises(ForbiddenException):
        TicketStateMachine.transition(ticket, TicketStatus.IN_PROGRESS, OTHER)
    assert ticket.status == TicketStatus.NOT_STARTED
    assert ticket.activities == []


def test_unassigned_ticket_cannot_transition():
    ticket = make_ticket()
    with pytest.raises(ForbiddenException):
        TicketStateMachine.transition(ticket, TicketStatus.IN_PROGRESS, AGENT)


def test_terminal_ticket_is_frozen():
    ticket = make_ticket(agent=AGENT, status=TicketStatus.INVALID)
    with pytest.raises(InvalidTransitionException):
        TicketStateMachine.transition(ticket, TicketStatus.IN_PROGRESS, AGENT)
    assert ticket.status == TicketStatus.INVALID


def test_ticket_rejects_closed_at_on_open_status():
    with pytest.raises(ValueError):
        make_ticket(status=TicketStatus.IN_PROGRESS, closed_at=NOW)
