"""
SLA Escalation Module
=====================

Bounded Context for time-based priority escalation.

Responsibilities:
- Raise LOW tickets to MEDIUM after 7 days open, MEDIUM to HIGH after 3
- Run the escalation pass and the weekly score job on a schedule
- Stop scheduled jobs cleanly on shutdown
"""

__version__ = "1.0.0"
