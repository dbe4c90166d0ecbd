"""
SLA Value Objects
=================

Immutable escalation rules.

Thresholds are fixed: a LOW ticket open 7 or more days becomes MEDIUM, a
MEDIUM ticket open 3 or more days becomes HIGH. HIGH is the ceiling and
priorities never go down.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from src.config import Priority


@dataclass(frozen=True)
class EscalationRule:
    """One priority step, taken once a ticket is `threshold_days` old."""

    from_priority: Priority
    to_priority: Priority
    threshold_days: int

    @property
    def reason(self) -> str:
        return (
            f"SLA breach: {self.from_priority.value} priority ticket "
            f"not closed within {self.threshold_days} days"
        )

    def details(self) -> str:
        """Activity log text for an escalation under this rule."""
        return (
            f"{self.reason}. Priority escalated from "
            f"{self.from_priority.value} to {self.to_priority.value}"
        )


ESCALATION_RULES: Dict[Priority, EscalationRule] = {
    Priority.LOW: EscalationRule(Priority.LOW, Priority.MEDIUM, 7),
    Priority.MEDIUM: EscalationRule(Priority.MEDIUM, Priority.HIGH, 3),
}


class EscalationPolicy:
    """
    Pure functions for SLA escalation decisions.

    Stateless utility class - all escalation rules in one place.
    """

    @staticmethod
    def days_since(created_at: datetime, now: datetime) -> int:
        """Whole days elapsed, truncated."""
        return (now - created_at).days

    @staticmethod
    def evaluate(priority: Optional[Priority], days_open: int) -> Optional[EscalationRule]:
        """
        Rule that applies to a ticket of this priority and age, or None.

        The threshold is inclusive: a LOW ticket exactly 7 days old escalates.
        """
        if priority is None:
            return None
        rule = ESCALATION_RULES.get(priority)
        if rule is None or days_open < rule.threshold_days:
            return None
        return rule
