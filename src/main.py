"""
Helpdesk Engine - Main Application
==================================

Support-ticket lifecycle and workload-assignment service.

Modules:
- Tickets: lifecycle state machine, comments, fuzzy search
- Assignment: workload-balanced auto-assignment, weekly productivity scores
- SLA: time-based priority escalation on a schedule

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, state machine, calculators
- Infrastructure: Database, search index, scheduler
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from src.config import settings
from src.core import ApplicationException

# Infrastructure
from src.infrastructure.database import init_database, close_database, create_tables
from src.infrastructure.search_index import close_search_index

# SLA Module - scheduling
from src.sla.infrastructure import JobScheduler
from src.sla.infrastructure.jobs import (
    SLA_ESCALATION_JOB_ID, WEEKLY_SCORES_JOB_ID,
    run_sla_escalation, run_weekly_scores,
)

# Module Routers
from src.tickets.interfaces import tickets_router
from src.assignment.interfaces import agents_router, manager_router
from src.sla.interfaces import sla_router

# Middleware and logging
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from src.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)

job_scheduler: Optional[JobScheduler] = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database
    3. Create database tables
    4. Start the SLA escalation and weekly score jobs

    SHUTDOWN:
    1. Stop the scheduler (running jobs finish their current ticket)
    2. Close the search index client
    3. Close database connections
    """
    global job_scheduler

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Helpdesk Engine", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()

    # Create tables (for development - use migrations in production)
    logger.info("Creating database tables")
    try:
        await create_tables()
    except Exception as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    if settings.sla_check_interval_seconds > 0:
        job_scheduler = JobScheduler()
        job_scheduler.add_interval_job(
            run_sla_escalation,
            seconds=settings.sla_check_interval_seconds,
            job_id=SLA_ESCALATION_JOB_ID,
            name="SLA escalation",
        )
        job_scheduler.add_cron_job(
            run_weekly_scores,
            job_id=WEEKLY_SCORES_JOB_ID,
            day_of_week=settings.score_job_day_of_week,
            hour=settings.score_job_hour,
            name="Weekly agent scores",
        )
        job_scheduler.start()
    else:
        logger.info("Scheduler disabled (sla_check_interval_seconds=0)")

    logger.info("Helpdesk Engine started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Helpdesk Engine")

    if job_scheduler:
        await job_scheduler.stop()
        job_scheduler = None

    await close_search_index()
    await close_database()

    logger.info("Helpdesk Engine shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Helpdesk Engine API",
    description="""
    ## Support-Ticket Lifecycle & Workload Assignment

    Callers identify themselves with the `X-User-Id` header.

    ---

    ### Tickets

    - `POST /api/v1/tickets` - Create a ticket
    - `GET /api/v1/tickets` - List, group or search tickets
    - `GET /api/v1/tickets/autocomplete` - Search suggestions
    - `PATCH /api/v1/tickets/{id}/status` - NOT_STARTED -> IN_PROGRESS -> RESOLVED | INVALID

    ### Assignment

    - `POST /api/manager/auto-assign/all` - Balance unassigned tickets across agents
    - `GET /api/v1/agents/workloads` - Weighted workload per agent

    Workload score = 0.5 x HIGH + 0.3 x MEDIUM + 0.2 x LOW active tickets.

    ### SLA

    | Priority | Escalates to | After |
    |----------|--------------|-------|
    | LOW      | MEDIUM       | 7 days |
    | MEDIUM   | HIGH         | 3 days |

    ---
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (from shared) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(tickets_router)
app.include_router(agents_router)
app.include_router(manager_router)
app.include_router(sla_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint for load balancers and orchestrators.

    Reports scheduler state and whether the search index is configured.
    """
    checks = {
        "scheduler": "running" if job_scheduler and job_scheduler.is_running else "stopped",
        "search_index": "configured" if settings.search_index_url else "disabled",
    }
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Helpdesk Engine",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "tickets": {"prefix": "/api/v1/tickets"},
            "agents": {"prefix": "/api/v1/agents"},
            "auto_assign": {"prefix": "/api/manager/auto-assign"},
            "sla": {"prefix": "/api/manager/sla"},
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
