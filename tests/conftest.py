import copy
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence
from uuid import uuid4

import pytest

from src.config import Priority, Role, TicketStatus, CLOSED_STATUSES
from src.core import SearchIndexException
from src.tickets.application import ISearchIndex, ITicketRepository, IUserRepository
from src.tickets.domain import Ticket, User
from src.assignment.application import IAgentScoreRepository
from src.assignment.domain import AgentScore

NOW = datetime(2024, 3, 13, 12, 0, tzinfo=timezone.utc)  # a Wednesday


class FakeTicketRepository(ITicketRepository):
    """In-memory ticket store with the same orderings as the SQL one."""

    def __init__(self):
        self.tickets: Dict[str, Ticket] = {}
        self.fail_on_save: set = set()
        self.save_count = 0

    def seed(self, ticket: Ticket) -> Ticket:
        if ticket.id is None:
            ticket.id = uuid4().hex
        self.tickets[ticket.id] = copy.deepcopy(ticket)
        return ticket

    def _all(self) -> List[Ticket]:
        return [copy.deepcopy(t) for t in self.tickets.values()]

    async def save(self, ticket: Ticket) -> Ticket:
        if ticket.id in self.fail_on_save:
            raise RuntimeError(f"write failed for {ticket.id}")
        self.save_count += 1
        if ticket.id is None:
            ticket.id = uuid4().hex
        self.tickets[ticket.id] = copy.deepcopy(ticket)
        return copy.deepcopy(ticket)

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        ticket = self.tickets.get(ticket_id)
        return copy.deepcopy(ticket) if ticket else None

    async def list_all(self) -> List[Ticket]:
        return sorted(self._all(), key=lambda t: t.created_at, reverse=True)

    async def list_by_assigned_agent(
        self,
        agent_id: str,
        statuses: Optional[Sequence[TicketStatus]] = None
    ) -> List[Ticket]:
        tickets = [
            t for t in self._all()
            if t.assigned_agent_id == agent_id and (statuses is None or t.status in statuses)
        ]
        return sorted(tickets, key=lambda t: t.created_at, reverse=True)

    async def list_unassigned(self) -> List[Ticket]:
        tickets = [t for t in self._all() if t.assigned_agent_id is None]
        return sorted(tickets, key=lambda t: t.created_at)

    async def list_by_status_not_in(self, statuses: Sequence[TicketStatus]) -> List[Ticket]:
        tickets = [t for t in self._all() if t.status not in statuses]
        return sorted(tickets, key=lambda t: t.created_at)

    async def list_closed_between(self, agent_id, status, start, end) -> List[Ticket]:
        return [
            t for t in self._all()
            if t.assigned_agent_id == agent_id and t.status == status
            and t.closed_at is not None and start <= t.closed_at <= end
        ]

    async def search_text(self, text: str, agent_id: Optional[str] = None) -> List[Ticket]:
        needle = text.lower()
        tickets = [
            t for t in self._all()
            if (agent_id is None or t.assigned_agent_id == agent_id)
            and (needle in t.title.lower() or needle in t.description.lower())
        ]
        return sorted(tickets, key=lambda t: t.created_at, reverse=True)


class FakeUserRepository(IUserRepository):

    def __init__(self, users: Optional[List[User]] = None):
        self.users: Dict[str, User] = {u.id: u for u in users or []}

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def list_by_role(self, role: Role) -> List[User]:
        return sorted((u for u in self.users.values() if u.role == role), key=lambda u: u.id)

    async def save(self, user: User) -> User:
        self.users[user.id] = user
        return user


class FakeScoreRepository(IAgentScoreRepository):

    def __init__(self):
        self.scores: Dict[tuple, AgentScore] = {}

    async def upsert(self, score: AgentScore) -> AgentScore:
        key = (score.agent_id, score.week_start_date)
        existing = self.scores.get(key)
        if existing is not None:
            score.id = existing.id
        self.scores[key] = score
        return score

    async def get_by_agent_and_week(self, agent_id, week_start):
        return self.scores.get((agent_id, week_start))

    async def list_by_week(self, week_start):
        found = [s for s in self.scores.values() if s.week_start_date == week_start]
        return sorted(found, key=lambda s: s.productivity_score, reverse=True)

    async def list_by_agent(self, agent_id):
        found = [s for s in self.scores.values() if s.agent_id == agent_id]
        return sorted(found, key=lambda s: s.week_start_date, reverse=True)

    async def get_latest_for_agent(self, agent_id):
        history = await self.list_by_agent(agent_id)
        return history[0] if history else None

    async def list_between(self, start, end):
        found = [s for s in self.scores.values() if start <= s.week_start_date <= end]
        return sorted(found, key=lambda s: (-s.week_start_date.toordinal(), s.agent_id))

    async def delete_before(self, cutoff):
        doomed = [k for k, s in self.scores.items() if s.week_start_date < cutoff]
        for key in doomed:
            del self.scores[key]
        return len(doomed)


class RecordingSearchIndex(ISearchIndex):

    def __init__(self, fail: bool = False):
        self.indexed: List[str] = []
        self.fail = fail

    async def index_ticket(self, ticket: Ticket) -> None:
        if self.fail:
            raise SearchIndexException("index unavailable", {"ticket_id": ticket.id})
        self.indexed.append(ticket.id)


def make_ticket(
    title: str = "Printer not working",
    description: str = "The office printer shows a paper jam error",
    priority: Optional[Priority] = None,
    status: TicketStatus = TicketStatus.NOT_STARTED,
    agent: Optional[User] = None,
    created_at: Optional[datetime] = None,
    closed_at: Optional[datetime] = None,
) -> Ticket:
    created_at = created_at or NOW
    if status in CLOSED_STATUSES and closed_at is None:
        closed_at = created_at
    return Ticket(
        title=title,
        description=description,
        customer_email="customer@example.com",
        customer_name="Casey Customer",
        status=status,
        priority=priority,
        assigned_agent_id=agent.id if agent else None,
        assigned_agent_name=agent.name if agent else None,
        created_at=created_at,
        updated_at=max(created_at, closed_at) if closed_at else created_at,
        closed_at=closed_at,
    )


@pytest.fixture
def manager():
    return User(id="manager1", name="Morgan Manager", email="morgan@example.com", role=Role.MANAGER)


@pytest.fixture
def agents():
    return [
        User(id="agent1", name="Alex Agent", email="alex@example.com", role=Role.AGENT),
        User(id="agent2", name="Blair Agent", email="blair@example.com", role=Role.AGENT),
        User(id="agent3", name="Cameron Agent", email="cameron@example.com", role=Role.AGENT),
    ]


@pytest.fixture
def ticket_repo():
    return FakeTicketRepository()


@pytest.fixture
def user_repo(manager, agents):
    return FakeUserRepository([manager, *agents])


@pytest.fixture
def score_repo():
    return FakeScoreRepository()


@pytest.fixture
def search_index():
    return RecordingSearchIndex()


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)
