"""
Tickets Interfaces Layer
========================

FastAPI route handlers for tickets. Handles HTTP requests/responses and
delegates to application services.
"""

from src.tickets.interfaces.controllers import router as tickets_router

__all__ = ["tickets_router"]
