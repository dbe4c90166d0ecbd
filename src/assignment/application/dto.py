"""
Assignment Application DTOs
===========================

Pydantic response models for workload, assignment and score endpoints.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.tickets.application.dto import TicketSummaryResponse
from src.assignment.domain import AgentDetails, AgentScore, AgentWorkload


class AgentWorkloadResponse(BaseModel):
    agent_id: str
    agent_name: str
    agent_email: str
    not_started_count: int
    in_progress_count: int
    total_active_tickets: int
    high_count: int
    medium_count: int
    low_count: int
    workload_score: float = Field(..., description="0.5*HIGH + 0.3*MEDIUM + 0.2*LOW; lower means more capacity")
    productivity_score: float

    @classmethod
    def from_domain(cls, workload: AgentWorkload) -> "AgentWorkloadResponse":
        return cls(**workload.to_dict())


class AgentScoreResponse(BaseModel):
    id: Optional[str] = None
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

    @classmethod
    def from_domain(cls, score: AgentScore) -> "AgentScoreResponse":
        return cls(
            id=score.id,
            agent_id=score.agent_id,
            agent_name=score.agent_name,
            agent_email=score.agent_email,
            week_start_date=score.week_start_date,
            week_end_date=score.week_end_date,
            tickets_resolved=score.tickets_resolved,
            tickets_invalid=score.tickets_invalid,
            tickets_closed=score.tickets_closed,
            productivity_score=score.productivity_score,
            calculated_at=score.calculated_at,
        )


class AgentDetailResponse(BaseModel):
    agent_id: str
    name: str
    email: str
    employee_id: Optional[str] = None
    phone_number: Optional[str] = None
    last_active_at: Optional[datetime] = None
    not_started_count: int
    in_progress_count: int
    closed_count: int
    productivity_score: float

    @classmethod
    def from_domain(cls, details: AgentDetails) -> "AgentDetailResponse":
        return cls(
            agent_id=details.agent_id,
            name=details.name,
            email=details.email,
            employee_id=details.employee_id,
            phone_number=details.phone_number,
            last_active_at=details.last_active_at,
            not_started_count=details.not_started_count,
            in_progress_count=details.in_progress_count,
            closed_count=details.closed_count,
            productivity_score=details.productivity_score,
        )


class AutoAssignResponse(BaseModel):
    tickets_assigned: int
    tickets_failed: int = 0
    tickets_skipped: int = Field(default=0, description="Unassigned tickets without a priority")
    assigned_tickets: List[TicketSummaryResponse] = Field(default_factory=list)
    message: str


class AssignmentStatsResponse(BaseModel):
    agent_workloads: List[AgentWorkloadResponse]
    unassigned_tickets_count: int
    total_agents: int
    total_active_tickets: int
