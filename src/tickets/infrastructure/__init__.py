"""
Tickets Infrastructure Layer
============================

Contains:
- Models: SQLAlchemy ORM models (TicketModel, UserModel)
- Repositories: Concrete implementations of repository interfaces
"""

from src.tickets.infrastructure.models import TicketModel, UserModel, new_ticket_id
from src.tickets.infrastructure.repositories import (
    SQLAlchemyTicketRepository,
    SQLAlchemyUserRepository,
    ticket_to_domain,
    user_to_domain,
)

__all__ = [
    # Models
    "TicketModel",
    "UserModel",
    "new_ticket_id",
    # Repositories
    "SQLAlchemyTicketRepository",
    "SQLAlchemyUserRepository",
    "ticket_to_domain",
    "user_to_domain",
]
