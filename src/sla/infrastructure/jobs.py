"""
Scheduled Jobs
==============

Job entry points registered with the JobScheduler. Each run opens its own
database session, since there is no request scope in the background.
"""

from src.infrastructure.database import get_session_context
from src.infrastructure.search_index import get_search_index
from src.tickets.infrastructure import SQLAlchemyTicketRepository, SQLAlchemyUserRepository
from src.assignment.application import AgentScoreService
from src.assignment.infrastructure import SQLAlchemyAgentScoreRepository
from src.sla.application import SlaEscalationService, EscalationRunResult
from src.sla.infrastructure.external import StopSignal

SLA_ESCALATION_JOB_ID = "sla_escalation"
WEEKLY_SCORES_JOB_ID = "weekly_agent_scores"


async def run_sla_escalation(should_stop: StopSignal) -> EscalationRunResult:
    async with get_session_context() as session:
        service = SlaEscalationService(SQLAlchemyTicketRepository(session), get_search_index())
        return await service.escalate_overdue_tickets(should_stop=should_stop)


async def run_weekly_scores(should_stop: StopSignal) -> None:
    # Scoring a week is one short pass per agent; the stop signal is not polled
    async with get_session_context() as session:
        service = AgentScoreService(
            SQLAlchemyTicketRepository(session),
            SQLAlchemyUserRepository(session),
            SQLAlchemyAgentScoreRepository(session),
        )
        await service.scheduled_score_calculation()
