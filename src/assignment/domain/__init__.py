"""
Assignment Domain Layer
=======================

Contains:
- Entities: AgentWorkload (derived), AgentScore (persisted weekly record)
- Domain Services: WorkloadCalculator, ProductivityCalculator

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.assignment.domain.entities import AgentWorkload, AgentScore, AgentDetails
from src.assignment.domain.calculators import (
    WorkloadCalculator,
    ProductivityCalculator,
    PRIORITY_WEIGHTS,
    BASE_PRODUCTIVITY_SCORE,
)

__all__ = [
    # Entities
    "AgentWorkload",
    "AgentScore",
    "AgentDetails",
    # Domain Services
    "WorkloadCalculator",
    "ProductivityCalculator",
    "PRIORITY_WEIGHTS",
    "BASE_PRODUCTIVITY_SCORE",
]
