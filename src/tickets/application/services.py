"""
Ticket Application Services
===========================

Orchestrates the ticket lifecycle: creation, manual assignment, status
transitions, priority changes, comments and role-scoped reads.

Every mutation is persisted as a single ticket write and then projected into
the search index. Index failures are logged and never fail the request.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from src.config import ActivityAction, Priority, Role, TicketStatus
from src.core import (
    ForbiddenException,
    ResourceNotFoundException,
    SearchIndexException,
    ValidationException,
)
from src.tickets.application.interfaces import ISearchIndex, ITicketRepository, IUserRepository
from src.tickets.domain import Activity, Comment, Ticket, TicketStateMachine, User, utcnow
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

COMMENT_PREVIEW_LENGTH = 50


class IAutoAssigner(ABC):
    """Interface for assigning a freshly created ticket to an agent."""

    @abstractmethod
    async def auto_assign_ticket(self, ticket_id: str) -> Ticket:
        """Assign the ticket to the least loaded agent, if it has a priority."""


async def project_to_index(search_index: Optional[ISearchIndex], ticket: Ticket) -> None:
    """Push a ticket into the search index, logging instead of raising on failure."""
    if search_index is None:
        return
    try:
        await search_index.index_ticket(ticket)
    except SearchIndexException as e:
        logger.warning(
            "Search index projection failed",
            extra={"ticket_id": ticket.id, "error": str(e)}
        )


class TicketService:
    """
    Service for ticket lifecycle operations.

    Coordinates the state machine, the ticket and user repositories and the
    optional search index.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        user_repository: IUserRepository,
        search_index: Optional[ISearchIndex] = None,
        auto_assigner: Optional[IAutoAssigner] = None
    ):
        self._tickets = ticket_repository
        self._users = user_repository
        self._search_index = search_index
        self._auto_assigner = auto_assigner

    # ========== Lookups ==========

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def get_user(self, user_id: str, resource_type: str = "User") -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException(resource_type, user_id)
        return user

    async def _persist(self, ticket: Ticket) -> Ticket:
        saved = await self._tickets.save(ticket)
        await project_to_index(self._search_index, saved)
        return saved

    # ========== Commands ==========

    async def create_ticket(
        self,
        title: str,
        description: str,
        customer_email: str,
        customer_name: str,
        priority: Optional[Priority] = None,
        auto_assign: bool = False
    ) -> Ticket:
        """
        Create a NOT_STARTED ticket with a TICKET_CREATED activity.

        With `auto_assign`, the new ticket is handed to the assignment engine;
        tickets without a priority stay unassigned.
        """
        now = utcnow()
        ticket = Ticket(
            title=title,
            description=description,
            customer_email=customer_email,
            customer_name=customer_name,
            priority=priority,
            created_at=now,
            updated_at=now,
        )
        ticket.add_activity(Activity.system(
            ActivityAction.TICKET_CREATED,
            f"Ticket created by customer: {customer_name}",
            now,
        ))

        saved = await self._persist(ticket)
        logger.info(
            "Ticket created",
            extra={"ticket_id": saved.id, "priority": priority.value if priority else None}
        )

        if auto_assign and self._auto_assigner is not None:
            saved = await self._auto_assigner.auto_assign_ticket(saved.id)
        return saved

    async def assign_ticket(self, ticket_id: str, agent_id: str, manager_id: str) -> Ticket:
        """
        Manually assign (or reassign) a ticket to an agent.

        Raises:
            ResourceNotFoundException: ticket, agent or manager does not exist
            ValidationException: target user is not an agent
            ForbiddenException: acting user is not a manager
        """
        ticket = await self.get_ticket(ticket_id)
        agent = await self.get_user(agent_id, "Agent")
        if not agent.is_agent:
            raise ValidationException(
                "Can only assign tickets to agents",
                {"user_id": agent_id, "role": agent.role.value}
            )

        manager = await self.get_user(manager_id, "Manager")
        if not manager.is_manager:
            raise ForbiddenException(
                "Only managers can assign tickets",
                {"user_id": manager_id}
            )

        previous_agent = ticket.assigned_agent_name
        now = utcnow()
        ticket.assign_to(agent, auto=False, timestamp=now)

        if previous_agent is None:
            details = f"Ticket assigned to {agent.name}"
        else:
            details = f"Ticket reassigned from {previous_agent} to {agent.name}"
        ticket.add_activity(Activity(
            actor_id=manager.id,
            actor_name=manager.name,
            action=ActivityAction.TICKET_ASSIGNED,
            details=details,
            timestamp=now,
        ))

        saved = await self._persist(ticket)
        logger.info(
            "Ticket assigned",
            extra={"ticket_id": saved.id, "agent_id": agent.id, "auto": False}
        )
        return saved

    async def update_status(self, ticket_id: str, new_status: TicketStatus, actor_id: str) -> Ticket:
        """
        Transition a ticket on behalf of its assigned agent.

        Raises:
            ResourceNotFoundException: ticket or actor does not exist
            ForbiddenException: actor is not the assigned agent
            InvalidTransitionException: same status or illegal edge
        """
        ticket = await self.get_ticket(ticket_id)
        if ticket.assigned_agent_id != actor_id:
            raise ForbiddenException(
                "You are not authorized to update this ticket",
                {"ticket_id": ticket_id, "actor_id": actor_id}
            )

        previous = ticket.status
        TicketStateMachine.validate_transition(previous, new_status)
        actor = await self.get_user(actor_id, "Agent")

        TicketStateMachine.transition(ticket, new_status, actor)
        saved = await self._persist(ticket)

        logger.info(
            "Ticket status changed",
            extra={
                "ticket_id": saved.id,
                "from_status": previous.value,
                "to_status": new_status.value,
                "actor_id": actor_id,
            }
        )
        return saved

    async def update_priority(self, ticket_id: str, priority: Priority, manager_id: str) -> Ticket:
        """Change a ticket's priority. Managers only."""
        ticket = await self.get_ticket(ticket_id)
        manager = await self.get_user(manager_id, "Manager")
        if not manager.is_manager:
            raise ForbiddenException(
                "Only managers can change ticket priority",
                {"user_id": manager_id}
            )

        previous = ticket.priority
        if previous == priority:
            return ticket

        now = utcnow()
        ticket.priority = priority
        ticket.touch(now)
        ticket.add_activity(Activity(
            actor_id=manager.id,
            actor_name=manager.name,
            action=ActivityAction.PRIORITY_CHANGED,
            details=f"Priority changed from {previous.value if previous else 'NONE'} to {priority.value}",
            timestamp=now,
        ))

        saved = await self._persist(ticket)
        logger.info(
            "Ticket priority changed",
            extra={
                "ticket_id": saved.id,
                "from_priority": previous.value if previous else None,
                "to_priority": priority.value,
            }
        )
        return saved

    async def add_comment(self, ticket_id: str, content: str, user_id: str) -> Ticket:
        """Append a comment from the ticket's assigned agent."""
        if not content or not content.strip():
            raise ValidationException("Comment content must not be empty")

        ticket = await self.get_ticket(ticket_id)
        if ticket.assigned_agent_id != user_id:
            raise ForbiddenException(
                "You are not authorized to comment on this ticket",
                {"ticket_id": ticket_id, "user_id": user_id}
            )
        user = await self.get_user(user_id)

        now = utcnow()
        ticket.comments.append(Comment(
            user_id=user.id,
            user_name=user.name,
            content=content,
            created_at=now,
        ))
        ticket.touch(now)

        preview = content
        if len(content) > COMMENT_PREVIEW_LENGTH:
            preview = content[:COMMENT_PREVIEW_LENGTH] + "..."
        ticket.add_activity(Activity(
            actor_id=user.id,
            actor_name=user.name,
            action=ActivityAction.COMMENT_ADDED,
            details=f"Comment added: {preview}",
            timestamp=now,
        ))

        return await self._persist(ticket)

    async def record_heartbeat(self, user_id: str) -> User:
        """Stamp the user's last_active_at."""
        user = await self.get_user(user_id)
        now = utcnow()
        user.last_active_at = now
        user.updated_at = now
        return await self._users.save(user)

    # ========== Queries ==========

    async def get_ticket_details(self, ticket_id: str, user_id: str) -> Ticket:
        """Full ticket view. Agents may only view tickets assigned to them."""
        ticket = await self.get_ticket(ticket_id)
        user = await self.get_user(user_id)
        if user.role == Role.AGENT and ticket.assigned_agent_id != user_id:
            raise ForbiddenException(
                "You are not authorized to view this ticket",
                {"ticket_id": ticket_id, "user_id": user_id}
            )
        return ticket

    async def list_all(self) -> List[Ticket]:
        return await self._tickets.list_all()

    async def list_unassigned(self) -> List[Ticket]:
        return await self._tickets.list_unassigned()

    async def list_for_agent(self, agent_id: str) -> List[Ticket]:
        return await self._tickets.list_by_assigned_agent(agent_id)

    async def list_grouped_by_status(self, agent_id: str) -> Dict[str, List[Ticket]]:
        """An agent's tickets keyed by status, in lifecycle order."""
        grouped: Dict[str, List[Ticket]] = {s.value: [] for s in TicketStatus}
        for ticket in await self._tickets.list_by_assigned_agent(agent_id):
            grouped[ticket.status.value].append(ticket)
        return grouped
