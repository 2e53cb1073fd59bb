"""Activities router: list, create, read and update activity runs."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowquest.clock import utcnow
from flowquest.database import get_db, use_collection
from flowquest.identifiers import generate_identifier
from flowquest.models.activity import Activity
from flowquest.schemas.activity import ActivityCreate, ActivityResponse, ActivityUpdate
from flowquest.schemas.common import ApiResponse, iso, ok
from flowquest.services.filters import apply_filters
from flowquest.services.lookup import get_or_404
from flowquest.services.validation import EntityKind, ensure_valid

router = APIRouter(
    prefix="/api/activities",
    tags=["activities"],
    dependencies=[Depends(use_collection(Activity))],
)


def _activity_to_response(activity: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=activity.id,
        name=activity.name,
        course_package_id=activity.course_package_id,
        agent_profile_id=activity.agent_profile_id,
        current_unit_id=activity.current_unit_id,
        memory_ids=list(activity.memory_ids or []),
        status=activity.status,
        start_time=iso(activity.start_time),
        end_time=iso(activity.end_time),
        updated_at=iso(activity.updated_at),
    )


def _activity_fields(activity: Activity) -> dict:
    return {
        "name": activity.name,
        "course_package_id": activity.course_package_id,
        "agent_profile_id": activity.agent_profile_id,
        "current_unit_id": activity.current_unit_id,
        "status": activity.status,
        "memory_ids": list(activity.memory_ids or []),
    }


@router.get("", response_model=ApiResponse[list[ActivityResponse]], response_model_exclude_unset=True)
def list_activities(
    status: Optional[str] = Query(None),
    start_after: Optional[datetime] = Query(None),
    start_before: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
):
    """List activities, newest start_time first."""
    params = {"status": status, "start_after": start_after, "start_before": start_before}
    activities = apply_filters(db.query(Activity), Activity, params).all()
    return ok([_activity_to_response(a) for a in activities])


@router.post("", response_model=ApiResponse[ActivityResponse], response_model_exclude_unset=True, status_code=201)
def create_activity(req: ActivityCreate, db: Session = Depends(get_db)):
    """Start a new activity. memory_ids begin empty; start_time is the server's clock."""
    data = req.model_dump()
    ensure_valid(EntityKind.ACTIVITY, data)

    activity = Activity(
        id=generate_identifier(),
        name=req.name,
        course_package_id=req.course_package_id,
        agent_profile_id=req.agent_profile_id,
        current_unit_id=req.current_unit_id or None,
        memory_ids=[],
        status=req.status or "in_progress",
        start_time=utcnow(),
    )
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return ok(_activity_to_response(activity))


@router.get("/{activity_id}", response_model=ApiResponse[ActivityResponse], response_model_exclude_unset=True)
def get_activity(activity_id: str, db: Session = Depends(get_db)):
    activity = get_or_404(db, Activity, activity_id, "Activity")
    return ok(_activity_to_response(activity))


@router.put("/{activity_id}", response_model=ApiResponse[ActivityResponse], response_model_exclude_unset=True)
def update_activity(activity_id: str, req: ActivityUpdate, db: Session = Depends(get_db)):
    """Apply the supplied fields to an activity after re-validating the result."""
    activity = get_or_404(db, Activity, activity_id, "Activity")
    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    merged = {**_activity_fields(activity), **changes}
    ensure_valid(EntityKind.ACTIVITY, merged)

    for field, value in changes.items():
        setattr(activity, field, value)
    if "current_unit_id" in changes and not changes["current_unit_id"]:
        activity.current_unit_id = None
    now = utcnow()
    if changes.get("status") == "completed" and activity.end_time is None:
        activity.end_time = now
    activity.updated_at = now
    db.commit()
    db.refresh(activity)
    return ok(_activity_to_response(activity))
