"""
Tickets Infrastructure Repositories
===================================

SQLAlchemy implementations of the ticket and user repository interfaces.

Each save is committed on its own so batch and scheduled operations leave a
consistent partial result if they stop midway.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Priority, Role, TicketStatus
from src.core import RepositoryException
from src.tickets.application.interfaces import ITicketRepository, IUserRepository
from src.tickets.domain import Activity, Comment, Ticket, User
from src.tickets.infrastructure.models import TicketModel, UserModel, new_ticket_id


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def ticket_to_domain(model: TicketModel) -> Ticket:
    return Ticket(
        id=model.id,
        title=model.title,
        description=model.description,
        customer_email=model.customer_email,
        customer_name=model.customer_name,
        status=TicketStatus(model.status),
        priority=Priority(model.priority) if model.priority else None,
        assigned_agent_id=model.assigned_agent_id,
        assigned_agent_name=model.assigned_agent_name,
        comments=[Comment.from_dict(c) for c in model.comments or []],
        activities=[Activity.from_dict(a) for a in model.activities or []],
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
        closed_at=_aware(model.closed_at),
        auto_assigned=model.auto_assigned,
    )


def user_to_domain(model: UserModel) -> User:
    return User(
        id=model.id,
        name=model.name,
        email=model.email,
        role=Role(model.role),
        employee_id=model.employee_id,
        phone_number=model.phone_number,
        last_active_at=_aware(model.last_active_at),
        created_at=_aware(model.created_at),
        updated_at=_aware(model.updated_at),
    )


class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of ticket repository.

    Handles persistence of Ticket entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, ticket: Ticket) -> Ticket:
        """Insert or update a ticket and commit."""
        try:
            model = None
            if ticket.id is not None:
                model = await self._session.get(TicketModel, ticket.id)
            if model is None:
                model = TicketModel(id=ticket.id or new_ticket_id())
                self._session.add(model)

            model.title = ticket.title
            model.description = ticket.description
            model.status = ticket.status.value
            model.priority = ticket.priority.value if ticket.priority else None
            model.assigned_agent_id = ticket.assigned_agent_id
            model.assigned_agent_name = ticket.assigned_agent_name
            model.auto_assigned = ticket.auto_assigned
            model.customer_email = ticket.customer_email
            model.customer_name = ticket.customer_name
            # Fresh lists so the JSON columns are marked dirty
            model.comments = [c.to_dict() for c in ticket.comments]
            model.activities = [a.to_dict() for a in ticket.activities]
            model.created_at = ticket.created_at
            model.updated_at = ticket.updated_at
            model.closed_at = ticket.closed_at

            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException(
                f"Failed to save ticket: {e}",
                {"ticket_id": ticket.id}
            )

        ticket.id = model.id
        return ticket

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID."""
        model = await self._session.get(TicketModel, ticket_id)
        return ticket_to_domain(model) if model else None

    async def list_all(self) -> List[Ticket]:
        stmt = select(TicketModel).order_by(TicketModel.created_at.desc())
        return await self._fetch(stmt)

    async def list_by_assigned_agent(
        self,
        agent_id: str,
        statuses: Optional[Sequence[TicketStatus]] = None
    ) -> List[Ticket]:
        stmt = select(TicketModel).where(TicketModel.assigned_agent_id == agent_id)
        if statuses is not None:
            stmt = stmt.where(TicketModel.status.in_([s.value for s in statuses]))
        stmt = stmt.order_by(TicketModel.created_at.desc())
        return await self._fetch(stmt)

    async def list_unassigned(self) -> List[Ticket]:
        stmt = (
            select(TicketModel)
            .where(TicketModel.assigned_agent_id.is_(None))
            .order_by(TicketModel.created_at.asc())
        )
        return await self._fetch(stmt)

    async def list_by_status_not_in(self, statuses: Sequence[TicketStatus]) -> List[Ticket]:
        stmt = (
            select(TicketModel)
            .where(TicketModel.status.not_in([s.value for s in statuses]))
            .order_by(TicketModel.created_at.asc())
        )
        return await self._fetch(stmt)

    async def list_closed_between(
        self,
        agent_id: str,
        status: TicketStatus,
        start: datetime,
        end: datetime
    ) -> List[Ticket]:
        stmt = select(TicketModel).where(
            TicketModel.assigned_agent_id == agent_id,
            TicketModel.status == status.value,
            TicketModel.closed_at >= start,
            TicketModel.closed_at <= end,
        )
        return await self._fetch(stmt)

    async def search_text(self, text: str, agent_id: Optional[str] = None) -> List[Ticket]:
        """Literal, case-insensitive substring match on title or description."""
        stmt = select(TicketModel).where(or_(
            TicketModel.title.icontains(text, autoescape=True),
            TicketModel.description.icontains(text, autoescape=True),
        ))
        if agent_id is not None:
            stmt = stmt.where(TicketModel.assigned_agent_id == agent_id)
        stmt = stmt.order_by(TicketModel.created_at.desc())
        return await self._fetch(stmt)

    async def _fetch(self, stmt) -> List[Ticket]:
        result = await self._session.execute(stmt)
        return [ticket_to_domain(m) for m in result.scalars().all()]


class SQLAlchemyUserRepository(IUserRepository):
    """SQLAlchemy implementation of user repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        model = await self._session.get(UserModel, user_id)
        return user_to_domain(model) if model else None

    async def list_by_role(self, role: Role) -> List[User]:
        stmt = select(UserModel).where(UserModel.role == role.value).order_by(UserModel.id)
        result = await self._session.execute(stmt)
        return [user_to_domain(m) for m in result.scalars().all()]

    async def save(self, user: User) -> User:
        try:
            model = await self._session.get(UserModel, user.id)
            if model is None:
                model = UserModel(id=user.id)
                self._session.add(model)

            model.name = user.name
            model.email = user.email
            model.role = user.role.value
            model.employee_id = user.employee_id
            model.phone_number = user.phone_number
            model.last_active_at = user.last_active_at
            if user.created_at is not None:
                model.created_at = user.created_at
            if user.updated_at is not None:
                model.updated_at = user.updated_at

            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException(
                f"Failed to save user: {e}",
                {"user_id": user.id}
            )
        return user
