"""
SLA Application Layer
=====================

Application layer for SLA escalation.

Contains:
- Services: SlaEscalationService (periodic priority escalation)
- DTOs: EscalationRunResponse

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from src.sla.application.services import SlaEscalationService, EscalationRunResult
from src.sla.application.dto import EscalationRunResponse

__all__ = [
    "SlaEscalationService",
    "EscalationRunResult",
    "EscalationRunResponse",
]
