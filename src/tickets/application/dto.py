"""
Tickets Application DTOs
========================

Pydantic request/response models for the tickets API.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from src.config import ActivityAction, Priority, Role, TicketStatus
from src.tickets.domain import Activity, Comment, Ticket, User


# ========== Request DTOs ==========

class CreateTicketRequest(BaseModel):
    """Ticket filed by a customer."""
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    customer_email: str = Field(..., min_length=3, max_length=255)
    customer_name: str = Field(..., min_length=1, max_length=255)
    priority: Optional[Priority] = None
    auto_assign: bool = Field(default=False, description="Hand the ticket to the assignment engine")


class UpdateStatusRequest(BaseModel):
    status: TicketStatus


class UpdatePriorityRequest(BaseModel):
    priority: Priority


class AssignTicketRequest(BaseModel):
    agent_id: str = Field(..., min_length=1)


class AddCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


# ========== Response DTOs ==========

class ActivityResponse(BaseModel):
    id: str
    actor_id: str
    actor_name: str
    action: ActivityAction
    details: str
    timestamp: datetime

    @classmethod
    def from_domain(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            actor_id=activity.actor_id,
            actor_name=activity.actor_name,
            action=activity.action,
            details=activity.details,
            timestamp=activity.timestamp,
        )


class CommentResponse(BaseModel):
    id: str
    user_id: str
    user_name: str
    content: str
    created_at: datetime

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            user_id=comment.user_id,
            user_name=comment.user_name,
            content=comment.content,
            created_at=comment.created_at,
        )


class TicketSummaryResponse(BaseModel):
    """Lightweight ticket view for lists and autocomplete."""
    id: str
    title: str
    status: TicketStatus
    priority: Optional[Priority] = None
    assigned_agent_id: Optional[str] = None
    assigned_agent_name: Optional[str] = None
    customer_name: str
    created_at: datetime
    updated_at: datetime
    auto_assigned: bool = False

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketSummaryResponse":
        return cls(
            id=ticket.id,
            title=ticket.title,
            status=ticket.status,
            priority=ticket.priority,
            assigned_agent_id=ticket.assigned_agent_id,
            assigned_agent_name=ticket.assigned_agent_name,
            customer_name=ticket.customer_name,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            auto_assigned=ticket.auto_assigned,
        )


class TicketResponse(TicketSummaryResponse):
    """Full ticket view including comments and the activity log."""
    description: str
    customer_email: str
    closed_at: Optional[datetime] = None
    comments: List[CommentResponse] = Field(default_factory=list)
    activities: List[ActivityResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketResponse":
        summary = TicketSummaryResponse.from_domain(ticket)
        return cls(
            **summary.model_dump(),
            description=ticket.description,
            customer_email=ticket.customer_email,
            closed_at=ticket.closed_at,
            comments=[CommentResponse.from_domain(c) for c in ticket.comments],
            activities=[ActivityResponse.from_domain(a) for a in ticket.activities],
        )


class TicketSearchResponse(BaseModel):
    tickets: List[TicketSummaryResponse]
    total_count: int
    page: int
    size: int
    total_pages: int


class AutocompleteResponse(BaseModel):
    tickets: List[TicketSummaryResponse]
    total_count: int = Field(..., description="Total matches across all passes")


GroupedTicketsResponse = Dict[str, List[TicketSummaryResponse]]


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    employee_id: Optional[str] = None
    phone_number: Optional[str] = None
    last_active_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            employee_id=user.employee_id,
            phone_number=user.phone_number,
            last_active_at=user.last_active_at,
        )
