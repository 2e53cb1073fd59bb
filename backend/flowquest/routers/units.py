"""Units router: the conversation challenges that make up a course package."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowquest.clock import utcnow
from flowquest.database import get_db, use_collection
from flowquest.identifiers import generate_identifier
from flowquest.models.unit import Unit
from flowquest.schemas.common import ApiResponse, iso, ok
from flowquest.schemas.unit import UnitCreate, UnitResponse, UnitUpdate
from flowquest.services.filters import apply_filters
from flowquest.services.lookup import get_or_404
from flowquest.services.validation import EntityKind, ensure_valid

router = APIRouter(
    prefix="/api/units",
    tags=["units"],
    dependencies=[Depends(use_collection(Unit))],
)

_UNIT_FIELDS = (
    "course_package_id",
    "title",
    "agent_role",
    "user_role",
    "intro_message",
    "outro_message",
    "max_turns",
    "agent_behavior_prompt",
    "pass_condition",
    "order",
    "difficulty_level",
)


def unit_to_response(unit: Unit) -> UnitResponse:
    return UnitResponse(
        id=unit.id,
        course_package_id=unit.course_package_id,
        title=unit.title,
        agent_role=unit.agent_role,
        user_role=unit.user_role,
        intro_message=unit.intro_message,
        outro_message=unit.outro_message,
        max_turns=unit.max_turns,
        agent_behavior_prompt=unit.agent_behavior_prompt,
        pass_condition=unit.pass_condition,
        order=unit.order,
        difficulty_level=unit.difficulty_level,
        created_at=iso(unit.created_at),
        updated_at=iso(unit.updated_at),
    )


@router.get("", response_model=ApiResponse[list[UnitResponse]], response_model_exclude_unset=True)
def list_units(
    course_package_id: Optional[str] = Query(None),
    agent_role: Optional[str] = Query(None),
    order_min: Optional[int] = Query(None),
    order_max: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    params = {
        "course_package_id": course_package_id,
        "agent_role": agent_role,
        "order_min": order_min,
        "order_max": order_max,
    }
    units = apply_filters(db.query(Unit), Unit, params).all()
    return ok([unit_to_response(u) for u in units])


@router.post("", response_model=ApiResponse[UnitResponse], response_model_exclude_unset=True, status_code=201)
def create_unit(req: UnitCreate, db: Session = Depends(get_db)):
    data = req.model_dump(mode="json", exclude_none=True)
    ensure_valid(EntityKind.UNIT, data)

    # Column defaults fill in anything the request left out
    unit = Unit(id=generate_identifier(), **data)
    db.add(unit)
    db.commit()
    db.refresh(unit)
    return ok(unit_to_response(unit))


@router.get("/{unit_id}", response_model=ApiResponse[UnitResponse], response_model_exclude_unset=True)
def get_unit(unit_id: str, db: Session = Depends(get_db)):
    unit = get_or_404(db, Unit, unit_id, "Unit")
    return ok(unit_to_response(unit))


@router.put("/{unit_id}", response_model=ApiResponse[UnitResponse], response_model_exclude_unset=True)
def update_unit(unit_id: str, req: UnitUpdate, db: Session = Depends(get_db)):
    unit = get_or_404(db, Unit, unit_id, "Unit")
    changes = req.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    merged = {**{field: getattr(unit, field) for field in _UNIT_FIELDS}, **changes}
    ensure_valid(EntityKind.UNIT, merged)

    for field, value in changes.items():
        setattr(unit, field, value)
    unit.updated_at = utcnow()
    db.commit()
    db.refresh(unit)
    return ok(unit_to_response(unit))
