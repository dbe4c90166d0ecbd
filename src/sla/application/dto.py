"""
SLA Application DTOs
=====================

Response models for the on-demand escalation endpoint.
"""

from pydantic import BaseModel, Field

from src.sla.application.services import EscalationRunResult


class EscalationRunResponse(BaseModel):
    """Totals for one escalation pass."""
    scanned: int = Field(..., description="Open tickets examined")
    escalated: int = Field(..., description="Tickets whose priority was raised")
    failed: int = Field(..., description="Tickets that could not be processed")
    stopped_early: bool = False

    @classmethod
    def from_domain(cls, result: EscalationRunResult) -> "EscalationRunResponse":
        return cls(
            scanned=result.scanned_count,
            escalated=result.escalated_count,
            failed=result.failed_count,
            stopped_early=result.stopped_early,
        )
