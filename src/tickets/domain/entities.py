"""
Ticket Domain Entities
=======================

Pure Python domain entities for the ticket lifecycle.

These entities carry the lifecycle invariants (closed_at set only in a
terminal status, append-only activity log) and are free of infrastructure
concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import uuid4

from src.config import (
    ActivityAction, Priority, Role, TicketStatus,
    CLOSED_STATUSES, ACTIVE_STATUSES,
    SYSTEM_ACTOR_ID, SYSTEM_ACTOR_NAME,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Activity:
    """
    Immutable entry in a ticket's activity log.

    Activities are only ever appended; never edited or removed.
    """

    actor_id: str
    actor_name: str
    action: ActivityAction
    details: str
    timestamp: datetime
    id: str = field(default_factory=lambda: str(uuid4()))

    @classmethod
    def system(cls, action: ActivityAction, details: str, timestamp: Optional[datetime] = None) -> "Activity":
        """Build an activity authored by the system (scheduler, auto-assignment)."""
        return cls(
            actor_id=SYSTEM_ACTOR_ID,
            actor_name=SYSTEM_ACTOR_NAME,
            action=action,
            details=details,
            timestamp=timestamp or utcnow(),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "action": self.action.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Activity":
        return cls(
            id=data["id"],
            actor_id=data["actor_id"],
            actor_name=data["actor_name"],
            action=ActivityAction(data["action"]),
            details=data.get("details", ""),
            timestamp=_parse_datetime(data["timestamp"]),
        )


@dataclass
class Comment:
    """Comment left on a ticket by its assigned agent."""

    user_id: str
    user_name: str
    content: str
    created_at: datetime
    id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Comment":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            user_name=data["user_name"],
            content=data["content"],
            created_at=_parse_datetime(data["created_at"]),
        )


@dataclass
class User:
    """
    A user of the system. Agents work tickets; managers assign them.

    Only AGENT users carry workload semantics.
    """

    id: str
    name: str
    email: str
    role: Role
    employee_id: Optional[str] = None
    phone_number: Optional[str] = None
    last_active_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_agent(self) -> bool:
        return self.role == Role.AGENT

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER


@dataclass
class Ticket:
    """
    Support ticket entity.

    `id` is assigned by the store on first save and is None before that.
    """

    title: str
    description: str
    customer_email: str
    customer_name: str
    status: TicketStatus = TicketStatus.NOT_STARTED
    priority: Optional[Priority] = None
    id: Optional[str] = None
    assigned_agent_id: Optional[str] = None
    assigned_agent_name: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)
    activities: List[Activity] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    closed_at: Optional[datetime] = None
    auto_assigned: bool = False

    def __post_init__(self):
        """Validate lifecycle invariants on construction."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")
        if (self.closed_at is not None) != (self.status in CLOSED_STATUSES):
            raise ValueError("closed_at must be set exactly when the ticket is RESOLVED or INVALID")

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES

    @property
    def is_assigned(self) -> bool:
        return self.assigned_agent_id is not None

    def add_activity(self, activity: Activity) -> None:
        self.activities.append(activity)

    def assign_to(self, agent: User, auto: bool, timestamp: Optional[datetime] = None) -> None:
        """Point the ticket at an agent. Only AGENT users may hold tickets."""
        if not agent.is_agent:
            raise ValueError(f"User {agent.id} is not an agent")
        self.assigned_agent_id = agent.id
        self.assigned_agent_name = agent.name
        self.auto_assigned = auto
        self.updated_at = timestamp or utcnow()

    def touch(self, timestamp: Optional[datetime] = None) -> None:
        self.updated_at = timestamp or utcnow()
