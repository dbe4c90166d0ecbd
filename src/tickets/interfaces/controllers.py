"""
Ticket Controllers (API Routes)
===============================

FastAPI routes for the ticket lifecycle and search.

Controllers are thin - they delegate to application services.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.config import settings
from src.core import ForbiddenException
from src.tickets.application import (
    AddCommentRequest,
    AssignTicketRequest,
    AutocompleteResponse,
    CreateTicketRequest,
    SearchService,
    TicketResponse,
    TicketSearchResponse,
    TicketService,
    TicketSummaryResponse,
    UpdatePriorityRequest,
    UpdateStatusRequest,
)
from src.tickets.domain import User
from src.assignment.application import AutoAssignmentService
from src.shared.api.dependencies import (
    get_auto_assignment_service,
    get_current_user,
    get_search_service,
    get_ticket_service,
    require_manager,
)

router = APIRouter(prefix="/api/v1/tickets", tags=["Tickets"])


def _summaries(tickets):
    return [TicketSummaryResponse.from_domain(t) for t in tickets]


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=TicketResponse,
    summary="Create a ticket",
    description="Customer-facing intake. New tickets start NOT_STARTED; "
                "set `auto_assign` to hand a prioritized ticket straight to the least loaded agent."
)
async def create_ticket(
    request: CreateTicketRequest,
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.create_ticket(
        title=request.title,
        description=request.description,
        customer_email=request.customer_email,
        customer_name=request.customer_name,
        priority=request.priority,
        auto_assign=request.auto_assign,
    )
    return TicketResponse.from_domain(ticket)


@router.get(
    "",
    summary="List or search tickets",
    description="""
    Behaviour depends on role and parameters:

    - `query` - search (agents only see their own tickets)
    - `assigned=false` - unassigned tickets (managers only)
    - `grouped=true` - an agent's tickets grouped by status
    - otherwise - all tickets (managers) or the agent's tickets
    """
)
async def list_tickets(
    query: Optional[str] = Query(None, description="Free-text search"),
    assigned: Optional[bool] = Query(None),
    grouped: Optional[bool] = Query(None),
    page: int = Query(0, ge=0),
    size: int = Query(settings.search_default_page_size, ge=1, le=100),
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
    search: SearchService = Depends(get_search_service)
):
    if query is not None and query.strip():
        result = await search.search(
            query, page=page, size=size,
            agent_id=None if user.is_manager else user.id
        )
        return TicketSearchResponse(
            tickets=_summaries(result.tickets),
            total_count=result.total_count,
            page=result.page,
            size=result.size,
            total_pages=result.total_pages,
        )

    if assigned is False:
        if not user.is_manager:
            raise ForbiddenException("Only managers can list unassigned tickets")
        return _summaries(await service.list_unassigned())

    if grouped and not user.is_manager:
        grouped_tickets = await service.list_grouped_by_status(user.id)
        return {status: _summaries(tickets) for status, tickets in grouped_tickets.items()}

    if user.is_manager:
        return _summaries(await service.list_all())
    return _summaries(await service.list_for_agent(user.id))


@router.get(
    "/autocomplete",
    response_model=AutocompleteResponse,
    summary="Search suggestions"
)
async def autocomplete(
    query: str = Query(..., min_length=1),
    limit: int = Query(settings.autocomplete_default_limit, ge=1, le=50),
    user: User = Depends(get_current_user),
    search: SearchService = Depends(get_search_service)
):
    agent_id = None if user.is_manager else user.id
    tickets = await search.autocomplete(query, limit=limit, agent_id=agent_id)
    total = await search.count(query, agent_id=agent_id)
    return AutocompleteResponse(tickets=_summaries(tickets), total_count=total)


@router.get(
    "/{ticket_id}",
    response_model=TicketResponse,
    summary="Get ticket details",
    responses={403: {"description": "Agent is not assigned to this ticket"}, 404: {"description": "Ticket not found"}}
)
async def get_ticket(
    ticket_id: str,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    return TicketResponse.from_domain(await service.get_ticket_details(ticket_id, user.id))


@router.patch(
    "/{ticket_id}/status",
    response_model=TicketResponse,
    summary="Change ticket status",
    description="NOT_STARTED -> IN_PROGRESS -> RESOLVED | INVALID. Only the assigned agent may transition a ticket.",
    responses={409: {"description": "Illegal or no-op transition"}}
)
async def update_status(
    ticket_id: str,
    request: UpdateStatusRequest,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.update_status(ticket_id, request.status, user.id)
    return TicketResponse.from_domain(ticket)


@router.patch(
    "/{ticket_id}/priority",
    response_model=TicketResponse,
    summary="Change ticket priority (manager)"
)
async def update_priority(
    ticket_id: str,
    request: UpdatePriorityRequest,
    manager: User = Depends(require_manager),
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.update_priority(ticket_id, request.priority, manager.id)
    return TicketResponse.from_domain(ticket)


@router.post(
    "/{ticket_id}/comments",
    response_model=TicketResponse,
    summary="Comment on a ticket"
)
async def add_comment(
    ticket_id: str,
    request: AddCommentRequest,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.add_comment(ticket_id, request.content, user.id)
    return TicketResponse.from_domain(ticket)


@router.patch(
    "/{ticket_id}/assign",
    response_model=TicketResponse,
    summary="Assign a ticket to an agent (manager)"
)
async def assign_ticket(
    ticket_id: str,
    request: AssignTicketRequest,
    manager: User = Depends(require_manager),
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.assign_ticket(ticket_id, request.agent_id, manager.id)
    return TicketResponse.from_domain(ticket)


@router.post(
    "/{ticket_id}/auto-assign",
    response_model=TicketResponse,
    summary="Auto-assign one ticket (manager)",
    description="Unprioritized tickets are returned unchanged with no assigned agent."
)
async def auto_assign_ticket(
    ticket_id: str,
    manager: User = Depends(require_manager),
    service: AutoAssignmentService = Depends(get_auto_assignment_service)
):
    ticket = await service.auto_assign_ticket(ticket_id)
    return TicketResponse.from_domain(ticket)
