"""Interaction reports router.

Reports are written through ``PUT /api/reports`` only: the body is addressed
either by ``_id`` or by (activity_id, user_id, session_id) and always
replaces the stored payload. ``PATCH`` merges just the supplied fields.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowquest.database import get_db, use_collection
from flowquest.models.interaction_report import InteractionReport
from flowquest.schemas.common import ApiResponse, iso, ok
from flowquest.schemas.report import ReportPatch, ReportResponse, ReportUpsert
from flowquest.services import upsert as upsert_service
from flowquest.services.filters import apply_filters
from flowquest.services.lookup import get_or_404, require_identifier

router = APIRouter(
    prefix="/api/reports",
    tags=["reports"],
    dependencies=[Depends(use_collection(InteractionReport))],
)


def _report_to_response(report: InteractionReport) -> ReportResponse:
    return ReportResponse(
        id=report.id,
        activity_id=report.activity_id,
        user_id=report.user_id,
        session_id=report.session_id,
        user_name=report.user_name,
        summary=report.summary,
        unit_results=list(report.unit_results or []),
        generated_at=iso(report.generated_at),
    )


@router.get("", response_model=ApiResponse[list[ReportResponse]], response_model_exclude_unset=True)
def list_reports(
    activity_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    session_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List reports, newest generated_at first."""
    params = {"activity_id": activity_id, "user_id": user_id, "session_id": session_id}
    reports = apply_filters(db.query(InteractionReport), InteractionReport, params).all()
    return ok([_report_to_response(r) for r in reports])


@router.put("", response_model=ApiResponse[ReportResponse], response_model_exclude_unset=True)
def upsert_report(req: ReportUpsert, db: Session = Depends(get_db)):
    data = req.model_dump(by_alias=True, mode="json")
    report = upsert_service.upsert(db, InteractionReport, data)
    return ok(_report_to_response(report))


@router.get("/{report_id}", response_model=ApiResponse[ReportResponse], response_model_exclude_unset=True)
def get_report(report_id: str, db: Session = Depends(get_db)):
    report = get_or_404(db, InteractionReport, report_id, "Report")
    return ok(_report_to_response(report))


@router.patch("/{report_id}", response_model=ApiResponse[ReportResponse], response_model_exclude_unset=True)
def patch_report(report_id: str, req: ReportPatch, db: Session = Depends(get_db)):
    require_identifier(report_id)
    changes = req.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    report = upsert_service.patch(db, InteractionReport, report_id, changes)
    return ok(_report_to_response(report))
