"""Unit model: one conversation challenge inside a course package."""

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text

from flowquest.clock import utcnow
from flowquest.database import Base
from flowquest.identifiers import generate_identifier


class Unit(Base):
    __tablename__ = "units"

    id = Column(String(24), primary_key=True, default=generate_identifier)
    course_package_id = Column(String(24), nullable=False)
    title = Column(String(200), nullable=False)
    agent_role = Column(String(200), nullable=False)
    user_role = Column(String(200), nullable=False)
    intro_message = Column(Text, nullable=False, default="")
    outro_message = Column(Text, nullable=False, default="")
    max_turns = Column(Integer, nullable=False, default=10)
    agent_behavior_prompt = Column(Text, nullable=False, default="")
    pass_condition = Column(JSON, nullable=True)  # {"type": "keyword" | "llm", "value": [...]}
    order = Column(Integer, nullable=False, default=1)
    difficulty_level = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_units_course_package_order", "course_package_id", "order"),
    )
