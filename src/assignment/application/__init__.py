"""
Assignment Application Layer
============================

Contains:
- Services: AutoAssignmentService, AgentScoreService, AgentDirectoryService
- Repository Interfaces: IAgentScoreRepository
- DTOs: Pydantic models for API serialization
"""

from src.assignment.application.services import (
    AutoAssignmentService,
    AgentScoreService,
    AgentDirectoryService,
    AutoAssignResult,
    IAgentScoreRepository,
)
from src.assignment.application.dto import (
    AgentWorkloadResponse,
    AgentScoreResponse,
    AgentDetailResponse,
    AutoAssignResponse,
    AssignmentStatsResponse,
)

__all__ = [
    # Services
    "AutoAssignmentService",
    "AgentScoreService",
    "AgentDirectoryService",
    "AutoAssignResult",
    # Repository Interfaces
    "IAgentScoreRepository",
    # DTOs
    "AgentWorkloadResponse",
    "AgentScoreResponse",
    "AgentDetailResponse",
    "AutoAssignResponse",
    "AssignmentStatsResponse",
]
