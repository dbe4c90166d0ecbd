"""
SLA Controllers (API Routes)
=============================

Manual trigger for the escalation pass that otherwise runs on a timer.
"""

from fastapi import APIRouter, Depends

from src.sla.application import EscalationRunResponse, SlaEscalationService
from src.shared.api.dependencies import get_sla_escalation_service, require_manager
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(
    prefix="/api/manager/sla",
    tags=["SLA Escalation"],
    dependencies=[Depends(require_manager)]
)


@router.post(
    "/run",
    response_model=EscalationRunResponse,
    summary="Run SLA escalation now",
    description="""
    Raise the priority of every open ticket that has breached its SLA:

    - LOW open for 7+ days -> MEDIUM
    - MEDIUM open for 3+ days -> HIGH

    HIGH is the ceiling. Each ticket is processed independently; failures
    are counted, not raised.
    """
)
async def run_escalation(service: SlaEscalationService = Depends(get_sla_escalation_service)):
    result = await service.escalate_overdue_tickets()
    logger.info(
        "Manual SLA escalation run",
        extra={"scanned": result.scanned_count, "escalated": result.escalated_count}
    )
    return EscalationRunResponse.from_domain(result)
