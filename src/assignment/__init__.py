"""
Assignment Module
=================

Bounded Context for distributing work across agents.

Responsibilities:
- Compute weighted workload per agent from active tickets
- Auto-assign single tickets and batches by priority tier
- Calculate and store weekly productivity scores
"""

__version__ = "1.0.0"
