"""Interaction report model: the summarized outcome of a session."""

from sqlalchemy import JSON, Column, DateTime, Index, String, Text

from flowquest.clock import utcnow
from flowquest.database import Base
from flowquest.identifiers import generate_identifier


class InteractionReport(Base):
    __tablename__ = "interaction_reports"

    id = Column(String(24), primary_key=True, default=generate_identifier)
    activity_id = Column(String(64), nullable=True)
    user_id = Column(String(64), nullable=True)
    session_id = Column(String(64), nullable=True)
    user_name = Column(String(200), nullable=False, default="")
    summary = Column(Text, nullable=False, default="")
    unit_results = Column(JSON, nullable=False, default=list)
    generated_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        # Exactly one report per natural key; also the ON CONFLICT target for upserts
        Index("ux_interaction_reports_natural_key", "activity_id", "user_id", "session_id", unique=True),
        Index("ix_interaction_reports_generated_at", "generated_at"),
    )
