"""
Shared Kernel Module
====================

Generic infrastructure used by all bounded contexts (tickets, assignment, sla).

DO NOT add ticket, assignment or SLA business rules to the shared kernel.
"""

__version__ = "1.0.0"
