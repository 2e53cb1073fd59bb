"""SQLAlchemy ORM models: one table per collection."""

from flowquest.models.course_package import CoursePackage
from flowquest.models.unit import Unit
from flowquest.models.agent_profile import AgentProfile
from flowquest.models.activity import Activity
from flowquest.models.session_record import SessionRecord
from flowquest.models.interaction_report import InteractionReport

__all__ = [
    "CoursePackage",
    "Unit",
    "AgentProfile",
    "Activity",
    "SessionRecord",
    "InteractionReport",
]
