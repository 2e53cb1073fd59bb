"""Tests for the query filter builder against an in-memory store."""

from datetime import datetime, timezone

import pytest

from flowquest.database import Store
from flowquest.models import Activity, AgentProfile, Unit
from flowquest.services.filters import apply_filters, build_filters, sort_units

PACKAGE_ID = "507f1f77bcf86cd799439011"
AGENT_ID = "507f1f77bcf86cd799439012"


@pytest.fixture
def db():
    store = Store("sqlite://")
    store.initialize()
    with store.session() as session:
        yield session
    store.close()


def add_activity(db, name, start_time, status="in_progress"):
    db.add(Activity(
        name=name,
        course_package_id=PACKAGE_ID,
        agent_profile_id=AGENT_ID,
        status=status,
        start_time=start_time,
    ))
    db.commit()


class TestBuildFilters:

    def test_empty_params_match_everything(self):
        assert build_filters(Activity, {}) == []

    def test_unknown_and_blank_params_are_ignored(self):
        assert build_filters(Activity, {"colour": "red", "status": "", "start_after": None}) == []

    def test_malformed_course_package_id_is_ignored(self):
        assert build_filters(Unit, {"course_package_id": "nope"}) == []
        assert len(build_filters(Unit, {"course_package_id": PACKAGE_ID})) == 1


class TestActivityFilters:

    def test_start_time_range_is_inclusive_and_newest_first(self, db):
        for day in (1, 2, 3, 4):
            add_activity(db, f"day {day}", datetime(2024, 1, day))

        params = {"start_after": datetime(2024, 1, 2), "start_before": datetime(2024, 1, 3)}
        names = [a.name for a in apply_filters(db.query(Activity), Activity, params)]
        assert names == ["day 3", "day 2"]

    def test_aware_bounds_are_compared_in_utc(self, db):
        add_activity(db, "noon", datetime(2024, 1, 1, 12))
        bound = datetime(2024, 1, 1, 13, tzinfo=timezone.utc)
        names = [a.name for a in apply_filters(db.query(Activity), Activity, {"start_after": bound})]
        assert names == []

    def test_status_equality(self, db):
        add_activity(db, "open", datetime(2024, 1, 1))
        add_activity(db, "done", datetime(2024, 1, 2), status="completed")
        rows = apply_filters(db.query(Activity), Activity, {"status": "completed"}).all()
        assert [a.name for a in rows] == ["done"]


class TestSubstringFilters:

    def test_agent_name_is_case_insensitive(self, db):
        db.add_all([AgentProfile(name="Barista Bella"), AgentProfile(name="Chef Carlo")])
        db.commit()
        rows = apply_filters(db.query(AgentProfile), AgentProfile, {"name": "BELLA"}).all()
        assert [a.name for a in rows] == ["Barista Bella"]

    def test_like_wildcards_are_literal(self, db):
        db.add_all([AgentProfile(name="100% Bella"), AgentProfile(name="1000 Bella")])
        db.commit()
        rows = apply_filters(db.query(AgentProfile), AgentProfile, {"name": "0%"}).all()
        assert [a.name for a in rows] == ["100% Bella"]

    def test_agents_sorted_in_insertion_order(self, db):
        for name in ("Zed", "Amy", "Mo"):
            db.add(AgentProfile(name=name))
            db.commit()
        rows = apply_filters(db.query(AgentProfile), AgentProfile, {}).all()
        assert [a.name for a in rows] == ["Zed", "Amy", "Mo"]


class TestUnitOrdering:

    def test_units_sorted_by_order_then_insertion(self, db):
        for title, order in (("b", 2), ("a1", 1), ("a2", 1)):
            db.add(Unit(
                course_package_id=PACKAGE_ID,
                title=title,
                agent_role="barista",
                user_role="customer",
                order=order,
            ))
            db.commit()
        rows = apply_filters(db.query(Unit), Unit, {"course_package_id": PACKAGE_ID}).all()
        assert [u.title for u in rows] == ["a1", "a2", "b"]

    def test_order_range(self, db):
        for order in (1, 5, 9):
            db.add(Unit(course_package_id=PACKAGE_ID, title=f"u{order}", agent_role="r", user_role="r", order=order))
        db.commit()
        rows = apply_filters(db.query(Unit), Unit, {"order_min": 2, "order_max": 9}).all()
        assert [u.order for u in rows] == [5, 9]

    def test_sort_embedded_units_is_stable(self):
        units = [{"title": "b", "order": 2}, {"title": "a1", "order": 1}, {"title": "a2", "order": 1}]
        assert [u["title"] for u in sort_units(units)] == ["a1", "a2", "b"]
