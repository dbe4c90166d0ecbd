"""
SLA Domain Layer
================

Domain layer for SLA escalation.

Contains:
- Value Objects: EscalationRule
- Domain Services: EscalationPolicy (stateless escalation decisions)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.sla.domain.value_objects import (
    EscalationPolicy,
    EscalationRule,
    ESCALATION_RULES,
)

__all__ = [
    "EscalationPolicy",
    "EscalationRule",
    "ESCALATION_RULES",
]
