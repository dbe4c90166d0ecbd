"""
SLA Infrastructure Layer
========================

Infrastructure for SLA escalation:
- External: APScheduler-backed JobScheduler for periodic jobs
"""

from src.sla.infrastructure.external import JobScheduler

__all__ = [
    "JobScheduler",
]
