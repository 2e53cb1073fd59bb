"""Activity model: a user's run through a course package with an agent."""

from sqlalchemy import JSON, Column, DateTime, Index, String

from flowquest.clock import utcnow
from flowquest.database import Base
from flowquest.identifiers import generate_identifier

ACTIVITY_STATUSES = ("in_progress", "completed")


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String(24), primary_key=True, default=generate_identifier)
    name = Column(String(200), nullable=False)
    course_package_id = Column(String(24), nullable=False)
    agent_profile_id = Column(String(24), nullable=False)
    current_unit_id = Column(String(24), nullable=True)
    memory_ids = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="in_progress")
    start_time = Column(DateTime, nullable=False, default=utcnow)
    end_time = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_activities_start_time", "start_time"),
        Index("ix_activities_status", "status"),
    )
