"""Database diagnostics router."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowquest.database import Store, get_db, get_store
from flowquest.errors import StoreError
from flowquest.schemas.common import ApiResponse, ok
from flowquest.schemas.diagnostics import DbStatus
from flowquest.services.seed import seed_sample_agent

router = APIRouter(prefix="/api/db", tags=["db"])


@router.get("/test", response_model=ApiResponse[DbStatus], response_model_exclude_unset=True)
def test_database(
    init: bool = Query(False),
    store: Store = Depends(get_store),
    db: Session = Depends(get_db),
):
    """Check the store connection; with ``init=true`` also ensure every collection."""
    if not store.ping():
        raise StoreError("Check DATABASE_URL and that the database server is running.", error="Database connection failed")

    if not init:
        return ok(DbStatus(connected=True, initialized=None))

    collections = store.initialize()
    seed_sample_agent(db)
    return ok(
        DbStatus(connected=True, initialized=True, collections=collections),
        message="Database connected and initialized",
    )
