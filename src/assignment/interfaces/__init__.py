"""
Assignment Interfaces Layer
===========================

FastAPI route handlers for agents and the manager auto-assignment console.
"""

from src.assignment.interfaces.controllers import agents_router, manager_router

__all__ = ["agents_router", "manager_router"]
