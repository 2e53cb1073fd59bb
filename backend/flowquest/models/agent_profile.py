"""Agent profile model: the persona an activity converses with."""

from sqlalchemy import JSON, Column, DateTime, Index, String

from flowquest.clock import utcnow
from flowquest.database import Base
from flowquest.identifiers import generate_identifier


class AgentProfile(Base):
    __tablename__ = "agent_profiles"

    id = Column(String(24), primary_key=True, default=generate_identifier)
    name = Column(String(100), nullable=False)
    persona = Column(JSON, nullable=False, default=dict)    # {"tone", "background", "voice"}
    memories = Column(JSON, nullable=False, default=list)   # embedded memory documents
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_agent_profiles_name", "name"),
    )
