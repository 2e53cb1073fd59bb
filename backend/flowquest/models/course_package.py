"""Course package model: a titled bundle of ordered units."""

from sqlalchemy import JSON, Column, DateTime, Index, String, Text

from flowquest.clock import utcnow
from flowquest.database import Base
from flowquest.identifiers import generate_identifier


class CoursePackage(Base):
    __tablename__ = "course_packages"

    id = Column(String(24), primary_key=True, default=generate_identifier)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    units = Column(JSON, nullable=False, default=list)  # embedded unit documents
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_course_packages_created_at", "created_at"),
    )
