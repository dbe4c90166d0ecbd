"""
Assignment Controllers (API Routes)
===================================

Agent directory, workload and score routes, plus the manager
auto-assignment console. Everything here except the heartbeat is
manager-only.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from src.tickets.application import TicketService, TicketSummaryResponse, UserResponse
from src.tickets.domain import User
from src.assignment.application import (
    AgentDetailResponse,
    AgentDirectoryService,
    AgentScoreResponse,
    AgentScoreService,
    AgentWorkloadResponse,
    AssignmentStatsResponse,
    AutoAssignmentService,
    AutoAssignResponse,
)
from src.shared.api.dependencies import (
    get_agent_directory_service,
    get_agent_score_service,
    get_auto_assignment_service,
    get_current_user,
    get_ticket_service,
    require_manager,
)


agents_router = APIRouter(prefix="/api/v1/agents", tags=["Agents"])
manager_router = APIRouter(
    prefix="/api/manager/auto-assign",
    tags=["Auto Assignment"],
    dependencies=[Depends(require_manager)]
)


def _scores(scores) -> List[AgentScoreResponse]:
    return [AgentScoreResponse.from_domain(s) for s in scores]


# ========== Agents ==========

@agents_router.get(
    "",
    response_model=List[UserResponse],
    summary="List agents"
)
async def list_agents(
    manager: User = Depends(require_manager),
    service: AgentDirectoryService = Depends(get_agent_directory_service)
):
    return [UserResponse.from_domain(agent) for agent in await service.list_agents()]


@agents_router.get(
    "/workloads",
    response_model=List[AgentWorkloadResponse],
    summary="Current workload of every agent"
)
async def get_agent_workloads(
    manager: User = Depends(require_manager),
    service: AutoAssignmentService = Depends(get_auto_assignment_service)
):
    return [AgentWorkloadResponse.from_domain(w) for w in await service.get_agent_workloads()]


@agents_router.get(
    "/scores",
    response_model=List[AgentScoreResponse],
    summary="Weekly productivity scores",
    description="`weeks=1` returns the current week only; larger values return the last N weeks, newest first."
)
async def get_agent_scores(
    weeks: int = Query(1, ge=1, le=52),
    manager: User = Depends(require_manager),
    service: AgentScoreService = Depends(get_agent_score_service)
):
    if weeks <= 1:
        return _scores(await service.get_current_week_scores())
    return _scores(await service.get_scores_for_last_n_weeks(weeks))


@agents_router.post(
    "/heartbeat",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Record activity for the acting user"
)
async def heartbeat(
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    await service.record_heartbeat(user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@agents_router.get(
    "/{agent_id}",
    response_model=AgentDetailResponse,
    summary="Agent details with ticket counts"
)
async def get_agent_details(
    agent_id: str,
    manager: User = Depends(require_manager),
    service: AgentDirectoryService = Depends(get_agent_directory_service)
):
    return AgentDetailResponse.from_domain(await service.get_agent_details(agent_id))


@agents_router.get(
    "/{agent_id}/workload",
    response_model=AgentWorkloadResponse,
    summary="Current workload of one agent"
)
async def get_agent_workload(
    agent_id: str,
    manager: User = Depends(require_manager),
    service: AutoAssignmentService = Depends(get_auto_assignment_service)
):
    return AgentWorkloadResponse.from_domain(await service.get_agent_workload(agent_id))


@agents_router.get(
    "/{agent_id}/score",
    response_model=AgentScoreResponse,
    summary="Latest weekly score of one agent",
    responses={404: {"description": "No score calculated yet"}}
)
async def get_agent_score(
    agent_id: str,
    manager: User = Depends(require_manager),
    service: AgentScoreService = Depends(get_agent_score_service)
):
    score = await service.get_latest_score_for_agent(agent_id)
    if score is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return AgentScoreResponse.from_domain(score)


# ========== Manager: auto-assignment ==========

@manager_router.post(
    "/all",
    response_model=AutoAssignResponse,
    summary="Auto-assign every unassigned ticket",
    description="""
    Processes HIGH, then MEDIUM, then LOW tickets. Within each priority the
    agents are ranked once by workload score and tickets are dealt
    round-robin over that ranking. Tickets without a priority are skipped.
    """
)
async def auto_assign_all(service: AutoAssignmentService = Depends(get_auto_assignment_service)):
    result = await service.auto_assign_all_unassigned_tickets()
    return AutoAssignResponse(
        tickets_assigned=result.assigned_count,
        tickets_failed=result.failed_count,
        tickets_skipped=result.skipped_count,
        assigned_tickets=[TicketSummaryResponse.from_domain(t) for t in result.assigned_tickets],
        message=result.message,
    )


@manager_router.get("/workloads", response_model=List[AgentWorkloadResponse])
async def get_workloads(service: AutoAssignmentService = Depends(get_auto_assignment_service)):
    return [AgentWorkloadResponse.from_domain(w) for w in await service.get_agent_workloads()]


@manager_router.get("/stats", response_model=AssignmentStatsResponse)
async def get_stats(service: AutoAssignmentService = Depends(get_auto_assignment_service)):
    stats = await service.get_assignment_stats()
    return AssignmentStatsResponse(
        agent_workloads=[AgentWorkloadResponse.from_domain(w) for w in stats["agent_workloads"]],
        unassigned_tickets_count=stats["unassigned_tickets_count"],
        total_agents=stats["total_agents"],
        total_active_tickets=stats["total_active_tickets"],
    )


@manager_router.get("/scores/current", response_model=List[AgentScoreResponse])
async def get_current_week_scores(service: AgentScoreService = Depends(get_agent_score_service)):
    return _scores(await service.get_current_week_scores())


@manager_router.get("/scores/history", response_model=List[AgentScoreResponse])
async def get_score_history(
    weeks: int = Query(4, ge=1, le=52),
    service: AgentScoreService = Depends(get_agent_score_service)
):
    return _scores(await service.get_scores_for_last_n_weeks(weeks))


@manager_router.post(
    "/scores/recalculate",
    response_model=List[AgentScoreResponse],
    summary="Recalculate weekly scores",
    description="Recomputes the week containing `week` (default: the current week), overwriting stored rows."
)
async def recalculate_scores(
    week: Optional[date] = Query(None, description="Any date within the target week"),
    service: AgentScoreService = Depends(get_agent_score_service)
):
    if week is None:
        return _scores(await service.calculate_current_week_scores())
    return _scores(await service.calculate_scores_for_week(week))
