"""
Shared API Dependencies
=======================

FastAPI dependency providers: request-scoped repositories, the acting user,
and the application services built on them.

The acting user is identified by the X-User-Id header; issuing and checking
credentials happens upstream of this service.
"""

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core import ForbiddenException
from src.infrastructure.database import get_session
from src.infrastructure.search_index import get_search_index
from src.tickets.application import (
    ISearchIndex, ITicketRepository, IUserRepository, SearchService, TicketService,
)
from src.tickets.domain import User
from src.tickets.infrastructure import SQLAlchemyTicketRepository, SQLAlchemyUserRepository
from src.assignment.application import (
    AgentDirectoryService, AgentScoreService, AutoAssignmentService, IAgentScoreRepository,
)
from src.assignment.infrastructure import SQLAlchemyAgentScoreRepository
from src.sla.application import SlaEscalationService


# ========== Repositories ==========

async def get_ticket_repository(session: AsyncSession = Depends(get_session)) -> ITicketRepository:
    return SQLAlchemyTicketRepository(session)


async def get_user_repository(session: AsyncSession = Depends(get_session)) -> IUserRepository:
    return SQLAlchemyUserRepository(session)


async def get_score_repository(session: AsyncSession = Depends(get_session)) -> IAgentScoreRepository:
    return SQLAlchemyAgentScoreRepository(session)


def get_index() -> ISearchIndex:
    return get_search_index()


# ========== Acting user ==========

async def get_current_user(
    x_user_id: str = Header(..., description="Id of the acting user"),
    users: IUserRepository = Depends(get_user_repository)
) -> User:
    user = await users.get_by_id(x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user"
        )
    return user


async def require_manager(user: User = Depends(get_current_user)) -> User:
    if not user.is_manager:
        raise ForbiddenException("Manager role required", {"user_id": user.id})
    return user


# ========== Services ==========

async def get_auto_assignment_service(
    tickets: ITicketRepository = Depends(get_ticket_repository),
    users: IUserRepository = Depends(get_user_repository),
    scores: IAgentScoreRepository = Depends(get_score_repository),
    index: ISearchIndex = Depends(get_index)
) -> AutoAssignmentService:
    return AutoAssignmentService(tickets, users, scores, index)


async def get_ticket_service(
    tickets: ITicketRepository = Depends(get_ticket_repository),
    users: IUserRepository = Depends(get_user_repository),
    index: ISearchIndex = Depends(get_index),
    assigner: AutoAssignmentService = Depends(get_auto_assignment_service)
) -> TicketService:
    return TicketService(tickets, users, index, assigner)


async def get_search_service(
    tickets: ITicketRepository = Depends(get_ticket_repository)
) -> SearchService:
    return SearchService(tickets)


async def get_agent_score_service(
    tickets: ITicketRepository = Depends(get_ticket_repository),
    users: IUserRepository = Depends(get_user_repository),
    scores: IAgentScoreRepository = Depends(get_score_repository)
) -> AgentScoreService:
    return AgentScoreService(tickets, users, scores)


async def get_agent_directory_service(
    users: IUserRepository = Depends(get_user_repository),
    tickets: ITicketRepository = Depends(get_ticket_repository),
    scores: IAgentScoreRepository = Depends(get_score_repository)
) -> AgentDirectoryService:
    return AgentDirectoryService(users, tickets, scores)


async def get_sla_escalation_service(
    tickets: ITicketRepository = Depends(get_ticket_repository),
    index: ISearchIndex = Depends(get_index)
) -> SlaEscalationService:
    return SlaEscalationService(tickets, index)
