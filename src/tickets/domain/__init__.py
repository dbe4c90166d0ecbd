"""
Tickets Domain Layer
====================

Domain layer for the ticket lifecycle.

Contains:
- Entities: Ticket, User, Comment, Activity
- Domain Services: TicketStateMachine (status transitions), fuzzy matching
  and relevance scoring (fuzzy module)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.tickets.domain.entities import Activity, Comment, Ticket, User, utcnow
from src.tickets.domain.state_machine import TicketStateMachine, VALID_TRANSITIONS
from src.tickets.domain import fuzzy

__all__ = [
    # Entities
    "Activity",
    "Comment",
    "Ticket",
    "User",
    "utcnow",
    # Domain Services
    "TicketStateMachine",
    "VALID_TRANSITIONS",
    "fuzzy",
]
