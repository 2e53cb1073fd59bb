"""Session records router: recorded interaction transcripts."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowquest.database import get_db, use_collection
from flowquest.errors import NotFoundError
from flowquest.identifiers import is_valid_identifier
from flowquest.models.session_record import SessionRecord
from flowquest.schemas.common import ApiResponse, iso, ok
from flowquest.schemas.session import SessionResponse, SessionUpsert
from flowquest.services import upsert as upsert_service
from flowquest.services.filters import SORT_ORDER, apply_filters

router = APIRouter(
    prefix="/api/sessions",
    tags=["sessions"],
    dependencies=[Depends(use_collection(SessionRecord))],
)


def _session_to_response(record: SessionRecord) -> SessionResponse:
    return SessionResponse(
        id=record.id,
        activity_id=record.activity_id,
        user_id=record.user_id,
        session_id=record.session_id,
        user_name=record.user_name,
        summary=record.summary,
        unit_results=list(record.unit_results or []),
        generated_at=iso(record.generated_at),
    )


@router.get("", response_model=ApiResponse[list[SessionResponse]], response_model_exclude_unset=True)
def list_sessions(
    activity_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    session_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    params = {"activity_id": activity_id, "user_id": user_id, "session_id": session_id}
    records = apply_filters(db.query(SessionRecord), SessionRecord, params).all()
    return ok([_session_to_response(r) for r in records])


@router.put("", response_model=ApiResponse[SessionResponse], response_model_exclude_unset=True)
def upsert_session(req: SessionUpsert, db: Session = Depends(get_db)):
    data = req.model_dump(by_alias=True, mode="json")
    record = upsert_service.upsert(db, SessionRecord, data)
    return ok(_session_to_response(record))


@router.get("/{session_key}", response_model=ApiResponse[SessionResponse], response_model_exclude_unset=True)
def get_session(session_key: str, db: Session = Depends(get_db)):
    """Look a session up by document id, or by session_id returning the newest revision."""
    record = None
    if is_valid_identifier(session_key):
        record = db.get(SessionRecord, session_key)
    if record is None:
        record = (
            db.query(SessionRecord)
            .filter(SessionRecord.session_id == session_key)
            .order_by(*SORT_ORDER[SessionRecord])
            .first()
        )
    if record is None:
        raise NotFoundError(f"No session with id or session_id {session_key}", error="Session not found")
    return ok(_session_to_response(record))
