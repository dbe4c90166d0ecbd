"""
Assignment Infrastructure Layer
===============================

Contains:
- Models: AgentScoreModel
- Repositories: SQLAlchemyAgentScoreRepository
"""

from src.assignment.infrastructure.models import AgentScoreModel
from src.assignment.infrastructure.repositories import (
    SQLAlchemyAgentScoreRepository,
    score_to_domain,
)

__all__ = [
    "AgentScoreModel",
    "SQLAlchemyAgentScoreRepository",
    "score_to_domain",
]
