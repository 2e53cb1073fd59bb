"""Session record model: the full transcript of one interaction session."""

from sqlalchemy import JSON, Column, DateTime, Index, String, Text

from flowquest.clock import utcnow
from flowquest.database import Base
from flowquest.identifiers import generate_identifier


class SessionRecord(Base):
    __tablename__ = "session_records"

    id = Column(String(24), primary_key=True, default=generate_identifier)
    activity_id = Column(String(64), nullable=True)
    user_id = Column(String(64), nullable=True)
    session_id = Column(String(64), nullable=True)  # client-chosen logical key
    user_name = Column(String(200), nullable=False, default="")
    summary = Column(Text, nullable=False, default="")
    unit_results = Column(JSON, nullable=False, default=list)  # per-unit results with conversation logs
    generated_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ux_session_records_natural_key", "activity_id", "user_id", "session_id", unique=True),
        Index("ix_session_records_session_generated", "session_id", "generated_at"),
    )
