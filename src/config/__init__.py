"""
Configuration Module
====================

Application settings and domain constants for the ticket lifecycle service.
"""

from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="helpdesk-engine", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/helpdesk",
        description="PostgreSQL connection URL (async)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Scheduling ==========
    sla_check_interval_seconds: int = Field(
        default=3600,
        description="Seconds between SLA escalation runs (0 disables scheduling)",
        ge=0
    )
    score_job_day_of_week: str = Field(
        default="mon",
        description="Day of week for the weekly productivity score job"
    )
    score_job_hour: int = Field(
        default=1,
        description="Hour of day for the weekly productivity score job",
        ge=0,
        le=23
    )

    # ========== Search ==========
    fuzzy_threshold: float = Field(
        default=0.70,
        description="Minimum word similarity for a fuzzy match",
        gt=0.0,
        le=1.0
    )
    search_default_page_size: int = Field(default=10, description="Default search page size", ge=1)
    autocomplete_default_limit: int = Field(default=5, description="Default autocomplete size", ge=1)

    # ========== Search Index (optional projection) ==========
    search_index_url: Optional[str] = Field(
        default=None,
        description="Base URL of an Elasticsearch-compatible index (unset disables indexing)"
    )
    search_index_name: str = Field(default="tickets", description="Index name for ticket documents")
    search_index_timeout_seconds: float = Field(
        default=2.0,
        description="Timeout for search index calls",
        ge=0.1,
        le=30
    )
    search_index_max_retries: int = Field(
        default=2,
        description="Attempts per index write before giving up",
        ge=1,
        le=5
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


settings = get_settings()


# ========== Constants ==========

class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    INVALID = "INVALID"


class Priority(str, Enum):
    """Ticket priority tiers. A ticket without one cannot be auto-assigned."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Role(str, Enum):
    """User roles."""
    AGENT = "AGENT"
    MANAGER = "MANAGER"


class ActivityAction(str, Enum):
    """Tags for entries in a ticket's activity log."""
    TICKET_CREATED = "TICKET_CREATED"
    TICKET_ASSIGNED = "TICKET_ASSIGNED"
    TICKET_AUTO_ASSIGNED = "TICKET_AUTO_ASSIGNED"
    STATUS_CHANGED = "STATUS_CHANGED"
    COMMENT_ADDED = "COMMENT_ADDED"
    PRIORITY_CHANGED = "PRIORITY_CHANGED"
    SLA_ESCALATION = "SLA_ESCALATION"


SYSTEM_ACTOR_ID = "SYSTEM"
SYSTEM_ACTOR_NAME = "System"


# ========== Lists for validation ==========

ACTIVE_STATUSES = [TicketStatus.NOT_STARTED, TicketStatus.IN_PROGRESS]
CLOSED_STATUSES = [TicketStatus.RESOLVED, TicketStatus.INVALID]

# Batch assignment processes priority buckets in this order
PRIORITY_PROCESSING_ORDER = [Priority.HIGH, Priority.MEDIUM, Priority.LOW]
