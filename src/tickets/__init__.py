"""
Tickets Module
==============

Bounded Context for the ticket lifecycle.

Responsibilities:
- Create tickets and move them through NOT_STARTED, IN_PROGRESS, RESOLVED/INVALID
- Manual assignment, priority changes and comments with an activity trail
- Exact and fuzzy ticket search with relevance ranking
"""

__version__ = "1.0.0"
