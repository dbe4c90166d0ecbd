"""
Tickets Application Layer
=========================

Contains:
- Services: TicketService (lifecycle), SearchService (exact + fuzzy search)
- Repository Interfaces: ITicketRepository, IUserRepository, ISearchIndex
- DTOs: Pydantic models for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from src.tickets.application.interfaces import (
    ITicketRepository,
    IUserRepository,
    ISearchIndex,
)
from src.tickets.application.services import (
    TicketService,
    IAutoAssigner,
    project_to_index,
)
from src.tickets.application.search import SearchService, SearchPage, is_id_fragment
from src.tickets.application.dto import (
    CreateTicketRequest,
    UpdateStatusRequest,
    UpdatePriorityRequest,
    AssignTicketRequest,
    AddCommentRequest,
    ActivityResponse,
    CommentResponse,
    TicketSummaryResponse,
    TicketResponse,
    TicketSearchResponse,
    AutocompleteResponse,
    UserResponse,
)

__all__ = [
    # Repository Interfaces
    "ITicketRepository",
    "IUserRepository",
    "ISearchIndex",
    "IAutoAssigner",
    # Services
    "TicketService",
    "SearchService",
    "SearchPage",
    "is_id_fragment",
    "project_to_index",
    # DTOs
    "CreateTicketRequest",
    "UpdateStatusRequest",
    "UpdatePriorityRequest",
    "AssignTicketRequest",
    "AddCommentRequest",
    "ActivityResponse",
    "CommentResponse",
    "TicketSummaryResponse",
    "TicketResponse",
    "TicketSearchResponse",
    "AutocompleteResponse",
    "UserResponse",
]
