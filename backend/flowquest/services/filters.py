"""Query filter builder: request filter parameters to SQL predicates.

Each collection declares which request parameters it understands and how
each one maps onto a column. Parameters that are unknown, ``None`` or empty
contribute nothing, so an empty parameter set matches every row. Sort
order is fixed per collection.
"""

from datetime import datetime
from typing import Any, Mapping

from sqlalchemy.orm import Query

from flowquest.clock import as_naive_utc
from flowquest.identifiers import is_valid_identifier
from flowquest.models import (
    Activity,
    AgentProfile,
    CoursePackage,
    InteractionReport,
    SessionRecord,
    Unit,
)

EQUALS = "eq"
CONTAINS = "icontains"
AT_LEAST = "gte"
AT_MOST = "lte"
IDENTIFIER = "id_eq"  # equality, applied only when the value is a well-formed identifier

FILTERS: dict[type, dict[str, tuple[Any, str]]] = {
    Activity: {
        "status": (Activity.status, EQUALS),
        "start_after": (Activity.start_time, AT_LEAST),
        "start_before": (Activity.start_time, AT_MOST),
    },
    AgentProfile: {
        "name": (AgentProfile.name, CONTAINS),
    },
    CoursePackage: {
        "title": (CoursePackage.title, CONTAINS),
        "created_after": (CoursePackage.created_at, AT_LEAST),
        "created_before": (CoursePackage.created_at, AT_MOST),
    },
    Unit: {
        "course_package_id": (Unit.course_package_id, IDENTIFIER),
        "agent_role": (Unit.agent_role, CONTAINS),
        "order_min": (Unit.order, AT_LEAST),
        "order_max": (Unit.order, AT_MOST),
    },
    InteractionReport: {
        "activity_id": (InteractionReport.activity_id, EQUALS),
        "user_id": (InteractionReport.user_id, EQUALS),
        "session_id": (InteractionReport.session_id, EQUALS),
    },
    SessionRecord: {
        "activity_id": (SessionRecord.activity_id, EQUALS),
        "user_id": (SessionRecord.user_id, EQUALS),
        "session_id": (SessionRecord.session_id, EQUALS),
    },
}

# Identifiers are generated in creation order, so sorting by id breaks ties
# by insertion order.
SORT_ORDER: dict[type, tuple] = {
    Activity: (Activity.start_time.desc(), Activity.id.desc()),
    AgentProfile: (AgentProfile.id.asc(),),
    CoursePackage: (CoursePackage.created_at.desc(), CoursePackage.id.desc()),
    Unit: (Unit.order.asc(), Unit.id.asc()),
    InteractionReport: (InteractionReport.generated_at.desc(), InteractionReport.id.desc()),
    SessionRecord: (SessionRecord.generated_at.desc(), SessionRecord.id.desc()),
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _predicate(column, op: str, value: Any):
    if isinstance(value, datetime):
        value = as_naive_utc(value)
    if op == EQUALS:
        return column == value
    if op == IDENTIFIER:
        return column == value if is_valid_identifier(value) else None
    if op == CONTAINS:
        return column.ilike(f"%{_escape_like(str(value))}%", escape="\\")
    if op == AT_LEAST:
        return column >= value
    if op == AT_MOST:
        return column <= value
    raise ValueError(f"Unknown filter operator: {op}")


def build_filters(model: type, params: Mapping[str, Any]) -> list:
    """Translate request parameters into a list of predicates for ``model``."""
    recognized = FILTERS.get(model, {})
    predicates = []
    for name, value in params.items():
        if name not in recognized or value is None or value == "":
            continue
        column, op = recognized[name]
        predicate = _predicate(column, op, value)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def apply_filters(query: Query, model: type, params: Mapping[str, Any]) -> Query:
    """Filter ``query`` by ``params`` and apply the collection's sort order."""
    return query.filter(*build_filters(model, params)).order_by(*SORT_ORDER[model])


def sort_units(units: list[dict]) -> list[dict]:
    """Order embedded unit documents by ``order``; ties keep insertion order."""
    return sorted(units, key=lambda unit: unit.get("order") if unit.get("order") is not None else 0)
