"""
Assignment Infrastructure Models
================================

SQLAlchemy ORM model for weekly agent scores.
"""

from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import Date, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database import Base


class AgentScoreModel(Base):
    """
    Database model for AgentScore entity.

    Maps to the 'agent_scores' table; one row per agent per week.
    """
    __tablename__ = "agent_scores"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    agent_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    agent_name: Mapped[str] = mapped_column(String(255), nullable=False)
    agent_email: Mapped[str] = mapped_column(String(255), nullable=False)

    week_start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    week_end_date: Mapped[date] = mapped_column(Date, nullable=False)

    tickets_resolved: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tickets_invalid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tickets_closed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    productivity_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("agent_id", "week_start_date", name="uq_agent_scores_agent_week"),
    )
