"""
SLA Application Services
========================

Periodic escalation of overdue tickets.

Run on a timer, outside any user request. Each ticket is read, escalated
and written independently, so a failure on one ticket never stops the run.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from src.config import ActivityAction, CLOSED_STATUSES
from src.tickets.application import ISearchIndex, ITicketRepository, project_to_index
from src.tickets.domain import Activity, Ticket, utcnow
from src.sla.domain import EscalationPolicy
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EscalationRunResult:
    """Totals for one escalation run."""

    scanned_count: int = 0
    escalated_count: int = 0
    failed_count: int = 0
    stopped_early: bool = False


class SlaEscalationService:
    """
    Service for raising the priority of tickets that breach their SLA.

    Scans every ticket that is not RESOLVED or INVALID.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        search_index: Optional[ISearchIndex] = None
    ):
        self._tickets = ticket_repository
        self._search_index = search_index

    async def escalate_overdue_tickets(
        self,
        now: Optional[datetime] = None,
        should_stop: Optional[Callable[[], bool]] = None
    ) -> EscalationRunResult:
        """
        Escalate every open ticket that has crossed its threshold.

        Args:
            now: Evaluation time (defaults to the current UTC time)
            should_stop: Polled before each ticket; when it returns True the
                run ends after the ticket in hand

        Returns:
            EscalationRunResult with scanned/escalated/failed counts
        """
        now = now or utcnow()
        logger.info("Starting SLA escalation check")

        tickets = await self._tickets.list_by_status_not_in(CLOSED_STATUSES)
        result = EscalationRunResult()

        for ticket in tickets:
            if should_stop is not None and should_stop():
                result.stopped_early = True
                logger.info("SLA escalation run stopping early", extra={"scanned": result.scanned_count})
                break

            result.scanned_count += 1
            try:
                if await self._escalate_if_needed(ticket, now):
                    result.escalated_count += 1
            except Exception as e:
                result.failed_count += 1
                logger.error(
                    "SLA escalation failed for ticket",
                    extra={"ticket_id": ticket.id, "error": str(e)}
                )

        logger.info(
            "SLA escalation check completed",
            extra={
                "scanned": result.scanned_count,
                "escalated": result.escalated_count,
                "failed": result.failed_count,
            }
        )
        return result

    async def _escalate_if_needed(self, ticket: Ticket, now: datetime) -> bool:
        rule = EscalationPolicy.evaluate(
            ticket.priority, EscalationPolicy.days_since(ticket.created_at, now)
        )
        if rule is None:
            return False

        ticket.priority = rule.to_priority
        ticket.touch(now)
        ticket.add_activity(Activity.system(ActivityAction.SLA_ESCALATION, rule.details(), now))

        saved = await self._tickets.save(ticket)
        await project_to_index(self._search_index, saved)

        logger.info(
            "Ticket escalated",
            extra={
                "ticket_id": saved.id,
                "from_priority": rule.from_priority.value,
                "to_priority": rule.to_priority.value,
            }
        )
        return True
