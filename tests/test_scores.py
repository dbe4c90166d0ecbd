import asyncio
from datetime import date, datetime, timezone

import pytest

from src.config import Priority, TicketStatus
from src.core import ValidationException
from src.assignment.application import AgentScoreService, AutoAssignmentService
from tests.conftest import make_ticket

MONDAY = date(2024, 3, 11)
WEDNESDAY = date(2024, 3, 13)


def _closed(agent, status, when):
    return make_ticket(
        priority=Priority.LOW, agent=agent, status=status,
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc), closed_at=when,
    )


@pytest.fixture
def service(ticket_repo, user_repo, score_repo):
    return AgentScoreService(ticket_repo, user_repo, score_repo)


def test_week_starts():
    assert AgentScoreService.get_current_week_start(WEDNESDAY) == MONDAY
    assert AgentScoreService.get_previous_week_start(WEDNESDAY) == date(2024, 3, 4)


def test_weekly_score_counts_closures_in_window(service, ticket_repo, agents):
    agent = agents[0]
    for day in range(11, 16):
        ticket_repo.seed(_closed(agent, TicketStatus.RESOLVED, datetime(2024, 3, day, 9, tzinfo=timezone.utc)))
    ticket_repo.seed(_closed(agent, TicketStatus.INVALID, datetime(2024, 3, 17, 23, 59, tzinfo=timezone.utc)))
    # outside the window on both sides
    ticket_repo.seed(_closed(agent, TicketStatus.RESOLVED, datetime(2024, 3, 10, 23, 59, tzinfo=timezone.utc)))
    ticket_repo.seed(_closed(agent, TicketStatus.RESOLVED, datetime(2024, 3, 18, 0, 0, tzinfo=timezone.utc)))

    scores = asyncio.run(service.calculate_scores_for_week(WEDNESDAY))

    assert [s.agent_id for s in scores] == ["agent1", "agent2", "agent3"]
    score = scores[0]
    assert score.week_start_date == MONDAY
    assert score.week_end_date == date(2024, 3, 17)
    assert score.tickets_resolved == 5
    assert score.tickets_invalid == 1
    assert score.tickets_closed == 6
    assert score.productivity_score == 5.5
    assert scores[1].productivity_score == 0.0


def test_recalculation_overwrites_week(service, ticket_repo, score_repo, agents):
    first = asyncio.run(service.calculate_scores_for_week(MONDAY))
    ticket_repo.seed(_closed(agents[0], TicketStatus.RESOLVED, datetime(2024, 3, 12, tzinfo=timezone.utc)))

    second = asyncio.run(service.calculate_scores_for_week(WEDNESDAY))

    assert len(score_repo.scores) == 3
    assert second[0].id == first[0].id
    stored = asyncio.run(score_repo.get_by_agent_and_week("agent1", MONDAY))
    assert stored.tickets_resolved == 1


def test_latest_score_feeds_workload(service, ticket_repo, user_repo, score_repo, agents):
    ticket_repo.seed(_closed(agents[0], TicketStatus.RESOLVED, datetime(2024, 3, 12, tzinfo=timezone.utc)))
    asyncio.run(service.calculate_scores_for_week(MONDAY))

    assignment = AutoAssignmentService(ticket_repo, user_repo, score_repo)
    workload = asyncio.run(assignment.get_agent_workload("agent1"))
    assert workload.productivity_score == 1.0
    assert asyncio.run(assignment.get_agent_workload("agent2")).productivity_score == 0.0


def test_history_and_last_n_weeks(service, score_repo):
    for week in (date(2024, 2, 26), date(2024, 3, 4), MONDAY):
        asyncio.run(service.calculate_scores_for_week(week))

    history = asyncio.run(service.get_score_history_for_agent("agent1"))
    assert [s.week_start_date for s in history] == [MONDAY, date(2024, 3, 4), date(2024, 2, 26)]
    assert asyncio.run(service.get_latest_score_for_agent("agent1")).week_start_date == MONDAY

    recent = asyncio.run(service.get_scores_for_last_n_weeks(2, today=WEDNESDAY))
    assert {s.week_start_date for s in recent} == {MONDAY, date(2024, 3, 4)}
    assert len(asyncio.run(service.get_current_week_scores(today=WEDNESDAY))) == 3

    with pytest.raises(ValidationException):
        asyncio.run(service.get_scores_for_last_n_weeks(0))


def test_cleanup_old_scores(service, score_repo):
    for week in (date(2024, 2, 26), date(2024, 3, 4), MONDAY):
        asyncio.run(service.calculate_scores_for_week(week))

    deleted = asyncio.run(service.cleanup_old_scores(1, today=WEDNESDAY))

    assert deleted == 3
    assert {s.week_start_date for s in score_repo.scores.values()} == {date(2024, 3, 4), MONDAY}


def test_previous_week_calculation(service):
    scores = asyncio.run(service.calculate_previous_week_scores(today=WEDNESDAY))
    assert {s.week_start_date for s in scores} == {date(2024, 3, 4)}
