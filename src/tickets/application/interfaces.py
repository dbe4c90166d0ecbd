"""
Tickets Repository Interfaces
=============================

Abstract data access contracts for tickets, users and the search index
projection. Implementations live in the infrastructure layer; tests use
in-memory fakes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from src.config import Role, TicketStatus
from src.tickets.domain import Ticket, User


class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        """
        Insert or update a ticket as one committed write.

        Assigns an id to new tickets and returns the stored ticket.
        """

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID."""

    @abstractmethod
    async def list_all(self) -> List[Ticket]:
        """List every ticket, newest first."""

    @abstractmethod
    async def list_by_assigned_agent(
        self,
        agent_id: str,
        statuses: Optional[Sequence[TicketStatus]] = None
    ) -> List[Ticket]:
        """List tickets assigned to an agent, optionally filtered by status."""

    @abstractmethod
    async def list_unassigned(self) -> List[Ticket]:
        """List tickets with no assigned agent."""

    @abstractmethod
    async def list_by_status_not_in(self, statuses: Sequence[TicketStatus]) -> List[Ticket]:
        """List tickets whose status is not one of `statuses`."""

    @abstractmethod
    async def list_closed_between(
        self,
        agent_id: str,
        status: TicketStatus,
        start: datetime,
        end: datetime
    ) -> List[Ticket]:
        """List an agent's tickets in `status` with closed_at in [start, end]."""

    @abstractmethod
    async def search_text(self, text: str, agent_id: Optional[str] = None) -> List[Ticket]:
        """Case-insensitive literal substring match on title or description, newest first."""


class IUserRepository(ABC):
    """Interface for user data access."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""

    @abstractmethod
    async def list_by_role(self, role: Role) -> List[User]:
        """List users with the given role."""

    @abstractmethod
    async def save(self, user: User) -> User:
        """Insert or update a user."""


class ISearchIndex(ABC):
    """Interface for the optional full-text index projection."""

    @abstractmethod
    async def index_ticket(self, ticket: Ticket) -> None:
        """Project a ticket document into the index."""
