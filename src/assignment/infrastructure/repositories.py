"""
Assignment Infrastructure Repositories
======================================

SQLAlchemy implementation of the agent score repository.
"""

from datetime import date, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core import RepositoryException
from src.assignment.application.services import IAgentScoreRepository
from src.assignment.domain import AgentScore
from src.assignment.infrastructure.models import AgentScoreModel


def score_to_domain(model: AgentScoreModel) -> AgentScore:
    calculated_at = model.calculated_at
    if calculated_at is not None and calculated_at.tzinfo is None:
        calculated_at = calculated_at.replace(tzinfo=timezone.utc)
    return AgentScore(
        id=model.id,
        agent_id=model.agent_id,
        agent_name=model.agent_name,
        agent_email=model.agent_email,
        week_start_date=model.week_start_date,
        week_end_date=model.week_end_date,
        tickets_resolved=model.tickets_resolved,
        tickets_invalid=model.tickets_invalid,
        tickets_closed=model.tickets_closed,
        productivity_score=model.productivity_score,
        calculated_at=calculated_at,
    )


class SQLAlchemyAgentScoreRepository(IAgentScoreRepository):
    """
    SQLAlchemy implementation of agent score repository.

    Upserts are keyed on (agent_id, week_start_date); an existing row keeps
    its id.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, agent_id: str, week_start: date) -> Optional[AgentScoreModel]:
        stmt = select(AgentScoreModel).where(
            AgentScoreModel.agent_id == agent_id,
            AgentScoreModel.week_start_date == week_start,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, score: AgentScore) -> AgentScore:
        try:
            model = await self._get_model(score.agent_id, score.week_start_date)
            if model is None:
                model = AgentScoreModel(
                    id=score.id,
                    agent_id=score.agent_id,
                    week_start_date=score.week_start_date,
                )
                self._session.add(model)

            model.agent_name = score.agent_name
            model.agent_email = score.agent_email
            model.week_end_date = score.week_end_date
            model.tickets_resolved = score.tickets_resolved
            model.tickets_invalid = score.tickets_invalid
            model.tickets_closed = score.tickets_closed
            model.productivity_score = score.productivity_score
            model.calculated_at = score.calculated_at

            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException(
                f"Failed to save agent score: {e}",
                {"agent_id": score.agent_id, "week_start": score.week_start_date.isoformat()}
            )

        score.id = model.id
        return score

    async def get_by_agent_and_week(self, agent_id: str, week_start: date) -> Optional[AgentScore]:
        model = await self._get_model(agent_id, week_start)
        return score_to_domain(model) if model else None

    async def list_by_week(self, week_start: date) -> List[AgentScore]:
        stmt = (
            select(AgentScoreModel)
            .where(AgentScoreModel.week_start_date == week_start)
            .order_by(AgentScoreModel.productivity_score.desc())
        )
        return await self._fetch(stmt)

    async def list_by_agent(self, agent_id: str) -> List[AgentScore]:
        stmt = (
            select(AgentScoreModel)
            .where(AgentScoreModel.agent_id == agent_id)
            .order_by(AgentScoreModel.week_start_date.desc())
        )
        return await self._fetch(stmt)

    async def get_latest_for_agent(self, agent_id: str) -> Optional[AgentScore]:
        stmt = (
            select(AgentScoreModel)
            .where(AgentScoreModel.agent_id == agent_id)
            .order_by(AgentScoreModel.week_start_date.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return score_to_domain(model) if model else None

    async def list_between(self, start: date, end: date) -> List[AgentScore]:
        stmt = (
            select(AgentScoreModel)
            .where(AgentScoreModel.week_start_date >= start, AgentScoreModel.week_start_date <= end)
            .order_by(AgentScoreModel.week_start_date.desc(), AgentScoreModel.agent_id)
        )
        return await self._fetch(stmt)

    async def delete_before(self, cutoff: date) -> int:
        try:
            result = await self._session.execute(
                delete(AgentScoreModel).where(AgentScoreModel.week_start_date < cutoff)
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise RepositoryException(f"Failed to delete old agent scores: {e}")
        return result.rowcount or 0

    async def _fetch(self, stmt) -> List[AgentScore]:
        result = await self._session.execute(stmt)
        return [score_to_domain(m) for m in result.scalars().all()]
