"""
Assignment Calculators
======================

Pure functions for workload and productivity scoring.

Stateless utility classes - all scoring rules in one place.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from src.config import Priority, TicketStatus
from src.tickets.domain import Ticket, User
from src.assignment.domain.entities import AgentWorkload

PRIORITY_WEIGHTS: Dict[Priority, float] = {
    Priority.HIGH: 0.5,
    Priority.MEDIUM: 0.3,
    Priority.LOW: 0.2,
}

RESOLVED_WEIGHT = 1.0
INVALID_WEIGHT = 0.5

# Agents with no score history yet
BASE_PRODUCTIVITY_SCORE = 1.0


class WorkloadCalculator:
    """Computes per-agent workload from the agent's active tickets."""

    @staticmethod
    def workload_score(high: int, medium: int, low: int) -> float:
        """
        0.5*high + 0.3*medium + 0.2*low, rounded to 4 places so equal loads
        compare equal.
        """
        score = (
            PRIORITY_WEIGHTS[Priority.HIGH] * high
            + PRIORITY_WEIGHTS[Priority.MEDIUM] * medium
            + PRIORITY_WEIGHTS[Priority.LOW] * low
        )
        return round(score, 4)

    @staticmethod
    def calculate(
        agent: User,
        active_tickets: Iterable[Ticket],
        productivity_score: float = BASE_PRODUCTIVITY_SCORE
    ) -> AgentWorkload:
        """
        Build an AgentWorkload from the agent's NOT_STARTED/IN_PROGRESS tickets.

        Tickets in other statuses are ignored.
        """
        workload = AgentWorkload(
            agent_id=agent.id,
            agent_name=agent.name,
            agent_email=agent.email,
            productivity_score=productivity_score,
        )

        for ticket in active_tickets:
            if ticket.status == TicketStatus.NOT_STARTED:
                workload.not_started_count += 1
            elif ticket.status == TicketStatus.IN_PROGRESS:
                workload.in_progress_count += 1
            else:
                continue

            if ticket.priority == Priority.HIGH:
                workload.high_count += 1
            elif ticket.priority == Priority.MEDIUM:
                workload.medium_count += 1
            elif ticket.priority == Priority.LOW:
                workload.low_count += 1

        workload.workload_score = WorkloadCalculator.workload_score(
            workload.high_count, workload.medium_count, workload.low_count
        )
        return workload

    @staticmethod
    def least_loaded(workloads: List[AgentWorkload]) -> Optional[AgentWorkload]:
        """Lowest workload score; the first one wins ties."""
        best = None
        for workload in workloads:
            if best is None or workload.workload_score < best.workload_score:
                best = workload
        return best

    @staticmethod
    def sort_by_capacity(workloads: List[AgentWorkload]) -> List[AgentWorkload]:
        """Ascending by workload score, stable for ties."""
        return sorted(workloads, key=lambda w: w.workload_score)


class ProductivityCalculator:
    """Weekly productivity scoring and ISO week arithmetic."""

    @staticmethod
    def productivity_score(resolved: int, invalid: int) -> float:
        return resolved * RESOLVED_WEIGHT + invalid * INVALID_WEIGHT

    @staticmethod
    def week_start(day: date) -> date:
        """Monday on or before `day`."""
        if isinstance(day, datetime):
            day = day.date()
        return day - timedelta(days=day.weekday())

    @staticmethod
    def week_window(week_start: date) -> Tuple[datetime, datetime]:
        """[Monday 00:00, Sunday 23:59:59.999999] in UTC."""
        start = datetime.combine(week_start, time.min, tzinfo=timezone.utc)
        end = datetime.combine(week_start + timedelta(days=6), time.max, tzinfo=timezone.utc)
        return start, end
