"""
Assignment Domain Entities
==========================

AgentWorkload is derived on demand and never persisted. AgentScore is the
persisted weekly productivity record, one per agent per ISO week.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional
from uuid import uuid4


@dataclass
class AgentWorkload:
    """
    Snapshot of an agent's active tickets.

    `workload_score` is the weighted sum by priority tier; lower means more
    capacity. Tickets without a priority count toward the raw totals only.
    """

    agent_id: str
    agent_name: str
    agent_email: str
    not_started_count: int = 0
    in_progress_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    workload_score: float = 0.0
    # Latest weekly productivity score; informational, not used for assignment
    productivity_score: float = 1.0

    @property
    def total_active_tickets(self) -> int:
        return self.not_started_count + self.in_progress_count

    def to_dict(self) -> dict:
        return {
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "agent_email": self.agent_email,
            "not_started_count": self.not_started_count,
            "in_progress_count": self.in_progress_count,
            "total_active_tickets": self.total_active_tickets,
            "high_count": self.high_count,
            "medium_count": self.medium_count,
            "low_count": self.low_count,
            "workload_score": self.workload_score,
            "productivity_score": self.productivity_score,
        }


@dataclass
class AgentDetails:
    """Agent profile with ticket counts, for the manager's agent view."""

    agent_id: str
    name: str
    email: str
    employee_id: Optional[str]
    phone_number: Optional[str]
    last_active_at: Optional[datetime]
    not_started_count: int
    in_progress_count: int
    closed_count: int
    productivity_score: float


@dataclass
class AgentScore:
    """Weekly productivity record. Unique per (agent_id, week_start_date)."""

    agent_id: str
    agent_name: str
    agent_email: str
    week_start_date: date
    week_end_date: date
    tickets_resolved: int
    tickets_invalid: int
    tickets_closed: int
    productivity_score: float
    calculated_at: datetime
    id: Optional[str] = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "agent_email": self.agent_email,
            "week_start_date": self.week_start_date.isoformat(),
            "week_end_date": self.week_end_date.isoformat(),
            "tickets_resolved": self.tickets_resolved,
            "tickets_invalid": self.tickets_invalid,
            "tickets_closed": self.tickets_closed,
            "productivity_score": self.productivity_score,
            "calculated_at": self.calculated_at.isoformat(),
        }
