"""
Ticket State Machine
====================

Legal status transitions:

    NOT_STARTED -> IN_PROGRESS -> RESOLVED
                               -> INVALID

RESOLVED and INVALID are terminal.
"""

from datetime import datetime
from typing import Dict, List, Optional

from src.config import ActivityAction, TicketStatus, CLOSED_STATUSES
from src.core import ForbiddenException, InvalidTransitionException
from src.tickets.domain.entities import Activity, Ticket, User, utcnow

VALID_TRANSITIONS: Dict[TicketStatus, List[TicketStatus]] = {
    TicketStatus.NOT_STARTED: [TicketStatus.IN_PROGRESS],
    TicketStatus.IN_PROGRESS: [TicketStatus.RESOLVED, TicketStatus.INVALID],
    TicketStatus.RESOLVED: [],
    TicketStatus.INVALID: [],
}


class TicketStateMachine:
    """Stateless transition rules for ticket status changes."""

    @staticmethod
    def is_valid_transition(current: TicketStatus, new: TicketStatus) -> bool:
        return new in VALID_TRANSITIONS.get(current, [])

    @staticmethod
    def validate_transition(current: TicketStatus, new: TicketStatus) -> None:
        if current == new:
            raise InvalidTransitionException(
                current, new, f"Ticket is already in {current.value} status"
            )
        if not TicketStateMachine.is_valid_transition(current, new):
            raise InvalidTransitionException(current, new)

    @staticmethod
    def transition(
        ticket: Ticket,
        new_status: TicketStatus,
        actor: User,
        now: Optional[datetime] = None
    ) -> Ticket:
        """
        Move a ticket to `new_status` on behalf of `actor`.

        Only the ticket's assigned agent may change its status. Entering a
        terminal status stamps closed_at; every transition appends one
        STATUS_CHANGED activity. Mutates and returns the ticket; the caller
        persists it.

        Raises:
            ForbiddenException: actor is not the assigned agent
            InvalidTransitionException: same status or illegal edge
        """
        if ticket.assigned_agent_id is None or ticket.assigned_agent_id != actor.id:
            raise ForbiddenException(
                "You are not authorized to update this ticket",
                {"ticket_id": ticket.id, "actor_id": actor.id}
            )

        previous = ticket.status
        TicketStateMachine.validate_transition(previous, new_status)

        timestamp = now or utcnow()
        ticket.status = new_status
        ticket.updated_at = timestamp
        if new_status in CLOSED_STATUSES and ticket.closed_at is None:
            ticket.closed_at = timestamp

        ticket.add_activity(Activity(
            actor_id=actor.id,
            actor_name=actor.name,
            action=ActivityAction.STATUS_CHANGED,
            details=f"Status changed from {previous.value} to {new_status.value}",
            timestamp=timestamp,
        ))
        return ticket
