"""Course packages router.

A package keeps its own embedded unit list. With ``include_units=true`` the
``units`` field is instead filled from the units collection, ordered by
``order`` and then creation order.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowquest.clock import utcnow
from flowquest.database import get_db, use_collection
from flowquest.identifiers import generate_identifier
from flowquest.models.course_package import CoursePackage
from flowquest.models.unit import Unit
from flowquest.routers.units import unit_to_response
from flowquest.schemas.common import ApiResponse, iso, ok
from flowquest.schemas.course_package import (
    CoursePackageCreate,
    CoursePackageResponse,
    CoursePackageUpdate,
)
from flowquest.services.filters import SORT_ORDER, apply_filters, sort_units
from flowquest.services.lookup import get_or_404
from flowquest.services.validation import EntityKind, ensure_valid

router = APIRouter(
    prefix="/api/course-packages",
    tags=["course-packages"],
    dependencies=[
        Depends(use_collection(CoursePackage)),
        Depends(use_collection(Unit)),
    ],
)


def _stored_units(db: Session, package_id: str) -> list[dict]:
    units = (
        db.query(Unit)
        .filter(Unit.course_package_id == package_id)
        .order_by(*SORT_ORDER[Unit])
        .all()
    )
    return [unit_to_response(u).model_dump(by_alias=True) for u in units]


def _package_to_response(db: Session, package: CoursePackage, include_units: bool = False) -> CoursePackageResponse:
    if include_units:
        units = _stored_units(db, package.id)
    else:
        units = sort_units(list(package.units or []))
    return CoursePackageResponse(
        id=package.id,
        title=package.title,
        description=package.description,
        units=units,
        created_at=iso(package.created_at),
        updated_at=iso(package.updated_at),
    )


def _embed_units(units: list[dict]) -> list[dict]:
    return [{**unit, "_id": unit.get("_id") or generate_identifier()} for unit in units]


def _dump_body(req: CoursePackageCreate) -> dict:
    return req.model_dump(by_alias=True, mode="json", exclude_unset=True, exclude_none=True)


@router.get("", response_model=ApiResponse[list[CoursePackageResponse]], response_model_exclude_unset=True)
def list_course_packages(
    title: Optional[str] = Query(None),
    created_after: Optional[datetime] = Query(None),
    created_before: Optional[datetime] = Query(None),
    include_units: bool = Query(False),
    db: Session = Depends(get_db),
):
    params = {"title": title, "created_after": created_after, "created_before": created_before}
    packages = apply_filters(db.query(CoursePackage), CoursePackage, params).all()
    return ok([_package_to_response(db, p, include_units) for p in packages])


@router.post("", response_model=ApiResponse[CoursePackageResponse], response_model_exclude_unset=True, status_code=201)
def create_course_package(req: CoursePackageCreate, db: Session = Depends(get_db)):
    data = _dump_body(req)
    ensure_valid(EntityKind.COURSE_PACKAGE, data)

    package = CoursePackage(
        id=generate_identifier(),
        title=data["title"],
        description=data["description"],
        units=_embed_units(data.get("units", [])),
    )
    db.add(package)
    db.commit()
    db.refresh(package)
    return ok(_package_to_response(db, package))


@router.get("/{package_id}", response_model=ApiResponse[CoursePackageResponse], response_model_exclude_unset=True)
def get_course_package(
    package_id: str,
    include_units: bool = Query(False),
    db: Session = Depends(get_db),
):
    package = get_or_404(db, CoursePackage, package_id, "Course package")
    return ok(_package_to_response(db, package, include_units))


@router.put("/{package_id}", response_model=ApiResponse[CoursePackageResponse], response_model_exclude_unset=True)
def update_course_package(package_id: str, req: CoursePackageUpdate, db: Session = Depends(get_db)):
    package = get_or_404(db, CoursePackage, package_id, "Course package")
    changes = _dump_body(req)
    merged = {
        "title": package.title,
        "description": package.description,
        "units": list(package.units or []),
        **changes,
    }
    ensure_valid(EntityKind.COURSE_PACKAGE, merged)

    package.title = merged["title"]
    package.description = merged["description"]
    package.units = _embed_units(merged["units"])
    package.updated_at = utcnow()
    db.commit()
    db.refresh(package)
    return ok(_package_to_response(db, package))
