"""
Assignment Application Services
===============================

Workload-based auto-assignment and weekly productivity scoring.

Workloads and scores are recomputed from the ticket store on every call;
nothing is cached between requests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from src.config import (
    ActivityAction, Role, TicketStatus,
    ACTIVE_STATUSES, CLOSED_STATUSES, PRIORITY_PROCESSING_ORDER,
)
from src.core import ResourceNotFoundException, ValidationException
from src.tickets.application import (
    IAutoAssigner, ISearchIndex, ITicketRepository, IUserRepository, project_to_index,
)
from src.tickets.domain import Activity, Ticket, User, utcnow
from src.assignment.domain import (
    AgentDetails, AgentScore, AgentWorkload,
    ProductivityCalculator, WorkloadCalculator, BASE_PRODUCTIVITY_SCORE,
)
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Repository Interfaces ==========

class IAgentScoreRepository(ABC):
    """Interface for weekly agent score storage."""

    @abstractmethod
    async def upsert(self, score: AgentScore) -> AgentScore:
        """Insert, or overwrite the row for the same (agent_id, week_start_date)."""

    @abstractmethod
    async def get_by_agent_and_week(self, agent_id: str, week_start: date) -> Optional[AgentScore]:
        """Get one agent's score for a week."""

    @abstractmethod
    async def list_by_week(self, week_start: date) -> List[AgentScore]:
        """All scores for a week."""

    @abstractmethod
    async def list_by_agent(self, agent_id: str) -> List[AgentScore]:
        """An agent's scores, newest week first."""

    @abstractmethod
    async def get_latest_for_agent(self, agent_id: str) -> Optional[AgentScore]:
        """An agent's most recent score."""

    @abstractmethod
    async def list_between(self, start: date, end: date) -> List[AgentScore]:
        """Scores with week_start_date in [start, end], newest week first."""

    @abstractmethod
    async def delete_before(self, cutoff: date) -> int:
        """Delete scores with week_start_date before `cutoff`; return the count."""


# ========== Results ==========

@dataclass
class AutoAssignResult:
    """Outcome of a batch auto-assignment run."""

    assigned_tickets: List[Ticket] = field(default_factory=list)
    failed_count: int = 0
    skipped_count: int = 0
    message: str = ""

    @property
    def assigned_count(self) -> int:
        return len(self.assigned_tickets)


# ========== Application Services ==========

class AutoAssignmentService(IAutoAssigner):
    """
    Assigns tickets to the agents with the most capacity.

    Single assignment picks the lowest workload score. Batch assignment
    processes HIGH, MEDIUM then LOW buckets; within a bucket agents are
    sorted once by workload score and tickets are dealt round-robin over
    that snapshot.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        user_repository: IUserRepository,
        score_repository: Optional[IAgentScoreRepository] = None,
        search_index: Optional[ISearchIndex] = None
    ):
        self._tickets = ticket_repository
        self._users = user_repository
        self._scores = score_repository
        self._search_index = search_index

    async def _agents(self) -> List[User]:
        # Sorted by id so equal workloads resolve the same way every time
        agents = await self._users.list_by_role(Role.AGENT)
        return sorted(agents, key=lambda a: a.id)

    async def _workload_for(self, agent: User) -> AgentWorkload:
        active = await self._tickets.list_by_assigned_agent(agent.id, ACTIVE_STATUSES)
        productivity = BASE_PRODUCTIVITY_SCORE
        if self._scores is not None:
            latest = await self._scores.get_latest_for_agent(agent.id)
            if latest is not None:
                productivity = latest.productivity_score
        return WorkloadCalculator.calculate(agent, active, productivity)

    async def _snapshot(self) -> Tuple[List[AgentWorkload], Dict[str, User]]:
        agents = await self._agents()
        workloads = [await self._workload_for(agent) for agent in agents]
        return workloads, {agent.id: agent for agent in agents}

    async def get_agent_workloads(self) -> List[AgentWorkload]:
        workloads, _ = await self._snapshot()
        return workloads

    async def get_agent_workload(self, agent_id: str) -> AgentWorkload:
        agent = await self._users.get_by_id(agent_id)
        if agent is None:
            raise ResourceNotFoundException("Agent", agent_id)
        if not agent.is_agent:
            raise ValidationException("User is not an agent", {"user_id": agent_id})
        return await self._workload_for(agent)

    async def _assign(self, ticket: Ticket, agent: User) -> Ticket:
        now = utcnow()
        ticket.assign_to(agent, auto=True, timestamp=now)
        ticket.add_activity(Activity.system(
            ActivityAction.TICKET_AUTO_ASSIGNED,
            f"Ticket auto-assigned to {agent.name} based on current workload",
            now,
        ))
        saved = await self._tickets.save(ticket)
        await project_to_index(self._search_index, saved)
        logger.info(
            "Ticket assigned",
            extra={"ticket_id": saved.id, "agent_id": agent.id, "auto": True}
        )
        return saved

    async def auto_assign_ticket(self, ticket_id: str) -> Ticket:
        """
        Assign one ticket to the least loaded agent.

        A ticket without a priority, or a run with no agents, is returned
        unchanged; callers check `assigned_agent_id` to detect the no-op.

        Raises:
            ResourceNotFoundException: ticket does not exist
            ValidationException: ticket is already closed
        """
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        if ticket.is_closed:
            raise ValidationException(
                "Cannot auto-assign a closed ticket",
                {"ticket_id": ticket_id, "status": ticket.status.value}
            )
        if ticket.priority is None:
            logger.info("Skipping auto-assignment of unprioritized ticket", extra={"ticket_id": ticket_id})
            return ticket

        workloads, agents = await self._snapshot()
        best = WorkloadCalculator.least_loaded(workloads)
        if best is None:
            logger.warning("No agents available for auto-assignment", extra={"ticket_id": ticket_id})
            return ticket

        return await self._assign(ticket, agents[best.agent_id])

    async def auto_assign_all_unassigned_tickets(self) -> AutoAssignResult:
        """
        Batch-assign every unassigned ticket that has a priority.

        Each ticket is saved on its own; a failure is counted and the batch
        moves on. The result lists exactly the tickets that were assigned.
        """
        unassigned = await self._tickets.list_unassigned()
        result = AutoAssignResult()

        buckets: Dict = {priority: [] for priority in PRIORITY_PROCESSING_ORDER}
        for ticket in unassigned:
            if ticket.priority is None or ticket.is_closed:
                result.skipped_count += 1
                continue
            buckets[ticket.priority].append(ticket)

        if not any(buckets.values()):
            result.message = "No unassigned tickets to assign"
            return result

        agents = await self._agents()
        if not agents:
            logger.warning("No agents available for batch auto-assignment")
            result.message = "No agents available for assignment"
            return result
        agents_by_id = {agent.id: agent for agent in agents}

        for priority in PRIORITY_PROCESSING_ORDER:
            bucket = buckets[priority]
            if not bucket:
                continue

            # Sorted once per bucket; round-robin over this snapshot
            ranked = WorkloadCalculator.sort_by_capacity(
                [await self._workload_for(agent) for agent in agents]
            )
            assigned_in_bucket = 0
            for i, ticket in enumerate(bucket):
                agent = agents_by_id[ranked[i % len(ranked)].agent_id]
                try:
                    result.assigned_tickets.append(await self._assign(ticket, agent))
                    assigned_in_bucket += 1
                except Exception as e:
                    result.failed_count += 1
                    logger.error(
                        "Auto-assignment failed",
                        extra={"ticket_id": ticket.id, "agent_id": agent.id, "error": str(e)}
                    )

            logger.info(
                "Priority bucket assigned",
                extra={
                    "priority": priority.value,
                    "tickets": len(bucket),
                    "assigned": assigned_in_bucket,
                    "agents": len(ranked),
                }
            )

        if result.failed_count:
            result.message = (
                f"Auto-assigned {result.assigned_count} tickets, "
                f"{result.failed_count} failed"
            )
        else:
            result.message = f"Successfully auto-assigned {result.assigned_count} tickets"
        logger.info(
            "Batch auto-assignment completed",
            extra={
                "assigned": result.assigned_count,
                "failed": result.failed_count,
                "skipped": result.skipped_count,
                "unassigned_total": len(unassigned),
            }
        )
        return result

    async def get_assignment_stats(self) -> dict:
        workloads = await self.get_agent_workloads()
        unassigned = await self._tickets.list_unassigned()
        return {
            "agent_workloads": workloads,
            "unassigned_tickets_count": len(unassigned),
            "total_agents": len(workloads),
            "total_active_tickets": sum(w.total_active_tickets for w in workloads),
        }


class AgentScoreService:
    """
    Weekly productivity scores.

    A score row is upserted per agent per week; recalculating a week
    overwrites that week's rows.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        user_repository: IUserRepository,
        score_repository: IAgentScoreRepository
    ):
        self._tickets = ticket_repository
        self._users = user_repository
        self._scores = score_repository

    @staticmethod
    def get_current_week_start(today: Optional[date] = None) -> date:
        return ProductivityCalculator.week_start(today or utcnow().date())

    @classmethod
    def get_previous_week_start(cls, today: Optional[date] = None) -> date:
        return cls.get_current_week_start(today) - timedelta(weeks=1)

    async def calculate_scores_for_week(self, any_date: date) -> List[AgentScore]:
        """Compute and upsert every agent's score for the week containing `any_date`."""
        monday = ProductivityCalculator.week_start(any_date)
        window_start, window_end = ProductivityCalculator.week_window(monday)

        agents = sorted(await self._users.list_by_role(Role.AGENT), key=lambda a: a.id)
        scores = []
        for agent in agents:
            resolved = await self._tickets.list_closed_between(
                agent.id, TicketStatus.RESOLVED, window_start, window_end
            )
            invalid = await self._tickets.list_closed_between(
                agent.id, TicketStatus.INVALID, window_start, window_end
            )
            score = AgentScore(
                agent_id=agent.id,
                agent_name=agent.name,
                agent_email=agent.email,
                week_start_date=monday,
                week_end_date=monday + timedelta(days=6),
                tickets_resolved=len(resolved),
                tickets_invalid=len(invalid),
                tickets_closed=len(resolved) + len(invalid),
                productivity_score=ProductivityCalculator.productivity_score(len(resolved), len(invalid)),
                calculated_at=utcnow(),
            )
            scores.append(await self._scores.upsert(score))

        logger.info(
            "Agent scores calculated",
            extra={"week_start": monday.isoformat(), "agents": len(scores)}
        )
        return scores

    async def calculate_current_week_scores(self, today: Optional[date] = None) -> List[AgentScore]:
        return await self.calculate_scores_for_week(self.get_current_week_start(today))

    async def calculate_previous_week_scores(self, today: Optional[date] = None) -> List[AgentScore]:
        return await self.calculate_scores_for_week(self.get_previous_week_start(today))

    async def scheduled_score_calculation(self) -> List[AgentScore]:
        """Weekly job entry point: scores the week that just ended."""
        logger.info("Running scheduled score calculation for previous week")
        return await self.calculate_previous_week_scores()

    async def get_current_week_scores(self, today: Optional[date] = None) -> List[AgentScore]:
        return await self._scores.list_by_week(self.get_current_week_start(today))

    async def get_latest_score_for_agent(self, agent_id: str) -> Optional[AgentScore]:
        return await self._scores.get_latest_for_agent(agent_id)

    async def get_score_history_for_agent(self, agent_id: str) -> List[AgentScore]:
        return await self._scores.list_by_agent(agent_id)

    async def get_scores_for_last_n_weeks(self, weeks: int, today: Optional[date] = None) -> List[AgentScore]:
        if weeks < 1:
            raise ValidationException("weeks must be >= 1", {"weeks": weeks})
        current = self.get_current_week_start(today)
        return await self._scores.list_between(current - timedelta(weeks=weeks - 1), current)

    async def cleanup_old_scores(self, weeks_to_keep: int, today: Optional[date] = None) -> int:
        cutoff = self.get_current_week_start(today) - timedelta(weeks=weeks_to_keep)
        deleted = await self._scores.delete_before(cutoff)
        logger.info(
            "Old agent scores removed",
            extra={"cutoff": cutoff.isoformat(), "deleted": deleted}
        )
        return deleted


class AgentDirectoryService:
    """Read-side views of agents for managers."""

    def __init__(
        self,
        user_repository: IUserRepository,
        ticket_repository: ITicketRepository,
        score_repository: Optional[IAgentScoreRepository] = None
    ):
        self._users = user_repository
        self._tickets = ticket_repository
        self._scores = score_repository

    async def list_agents(self) -> List[User]:
        agents = await self._users.list_by_role(Role.AGENT)
        return sorted(agents, key=lambda a: a.id)

    async def get_agent_details(self, agent_id: str) -> AgentDetails:
        agent = await self._users.get_by_id(agent_id)
        if agent is None:
            raise ResourceNotFoundException("Agent", agent_id)
        if not agent.is_agent:
            raise ValidationException("User is not an agent", {"user_id": agent_id})

        active = await self._tickets.list_by_assigned_agent(agent_id, ACTIVE_STATUSES)
        closed = await self._tickets.list_by_assigned_agent(agent_id, CLOSED_STATUSES)

        productivity = BASE_PRODUCTIVITY_SCORE
        if self._scores is not None:
            latest = await self._scores.get_latest_for_agent(agent_id)
            if latest is not None:
                productivity = latest.productivity_score

        return AgentDetails(
            agent_id=agent.id,
            name=agent.name,
            email=agent.email,
            employee_id=agent.employee_id,
            phone_number=agent.phone_number,
            last_active_at=agent.last_active_at,
            not_started_count=sum(1 for t in active if t.status == TicketStatus.NOT_STARTED),
            in_progress_count=sum(1 for t in active if t.status == TicketStatus.IN_PROGRESS),
            closed_count=len(closed),
            productivity_score=productivity,
        )
