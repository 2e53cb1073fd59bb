"""Upsert resolver for session records and interaction reports.

A write is addressed either by ``_id`` or by the natural key
(activity_id, user_id, session_id):

  1. a well-formed ``_id`` wins;
  2. otherwise all three natural key fields must be present;
  3. otherwise the write is rejected before the database is touched.

The write itself is a single ``INSERT ... ON CONFLICT DO UPDATE`` so two
concurrent upserts on the same key serialize inside the database and the
stored payload is always exactly one writer's. Payload fields are replaced
wholesale (omitted ones fall back to their empty default) and
``generated_at`` is stamped with the write time on every write.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flowquest import clock
from flowquest.errors import MissingKeyError, NotFoundError, ValidationError
from flowquest.identifiers import generate_identifier, is_valid_identifier

logger = logging.getLogger(__name__)

NATURAL_KEY = ("activity_id", "user_id", "session_id")

# Mutable payload fields and the value they take when a write omits them
PAYLOAD_DEFAULTS = {
    "user_name": "",
    "summary": "",
    "unit_results": [],
}

_ON_CONFLICT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


@dataclass(frozen=True)
class UpsertKey:
    """Where an upsert lands: a document id, or a natural key."""

    id: Optional[str] = None
    natural: Optional[tuple[str, str, str]] = None

    @property
    def by_id(self) -> bool:
        return self.id is not None

    def criteria(self, model) -> list:
        if self.by_id:
            return [model.id == self.id]
        return [getattr(model, field) == value for field, value in zip(NATURAL_KEY, self.natural)]

    def describe(self) -> str:
        if self.by_id:
            return f"_id={self.id}"
        return ", ".join(f"{field}={value}" for field, value in zip(NATURAL_KEY, self.natural))


def resolve_key(data: Mapping[str, Any]) -> UpsertKey:
    """Pick the addressing key for an upsert, or raise MissingKeyError."""
    doc_id = data.get("_id", data.get("id"))
    if is_valid_identifier(doc_id):
        return UpsertKey(id=doc_id)
    natural = tuple(data.get(field) for field in NATURAL_KEY)
    if all(natural):
        return UpsertKey(natural=natural)
    raise MissingKeyError()


def build_payload(data: Mapping[str, Any]) -> dict:
    """Full replacement payload: supplied values, else the empty default."""
    payload = {}
    for field, default in PAYLOAD_DEFAULTS.items():
        value = data.get(field)
        payload[field] = value if value is not None else (list(default) if isinstance(default, list) else default)
    return payload


def _supplied_key_fields(data: Mapping[str, Any]) -> dict:
    return {field: data[field] for field in NATURAL_KEY if data.get(field) is not None}


def upsert(db: Session, model, data: Mapping[str, Any]):
    """Locate-or-create the document addressed by ``data`` and replace its payload.

    ``data`` is a plain dict of request fields (``_id`` may be present).
    Returns the stored document re-read after the commit.
    """
    key = resolve_key(data)
    values = build_payload(data)
    values["generated_at"] = clock.utcnow()

    if key.by_id:
        # Key fields are written when supplied, otherwise the stored ones stay
        key_fields = _supplied_key_fields(data)
        insert_values = {"id": key.id, **key_fields, **values}
        conflict_target = ["id"]
        update_fields = list(values) + list(key_fields)
    else:
        insert_values = {"id": generate_identifier(), **dict(zip(NATURAL_KEY, key.natural)), **values}
        conflict_target = list(NATURAL_KEY)
        update_fields = list(values)

    try:
        _write(db, model, key, insert_values, conflict_target, update_fields)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Upsert on %s (%s) collided with another document: %s", model.__tablename__, key.describe(), exc.orig)
        raise ValidationError(
            message="Another document already uses this (activity_id, user_id, session_id)",
            error="Natural key conflict",
        ) from exc

    return db.scalars(select(model).where(*key.criteria(model))).one()


def _write(db: Session, model, key: UpsertKey, insert_values: dict, conflict_target: list, update_fields: list) -> None:
    dialect = db.get_bind().dialect.name
    insert = _ON_CONFLICT_INSERTS.get(dialect)
    if insert is not None:
        stmt = insert(model).values(**insert_values)
        stmt = stmt.on_conflict_do_update(
            index_elements=conflict_target,
            set_={field: stmt.excluded[field] for field in update_fields},
        )
        db.execute(stmt)
        return

    # Dialects without ON CONFLICT: lock the addressed row for the transaction
    existing = db.scalars(select(model).where(*key.criteria(model)).with_for_update()).first()
    if existing is None:
        db.add(model(**insert_values))
    else:
        for field in update_fields:
            setattr(existing, field, insert_values[field])
    db.flush()


def patch(db: Session, model, doc_id: str, changes: Mapping[str, Any]):
    """Overwrite only the supplied fields of one document and refresh generated_at."""
    values = {**changes, "generated_at": clock.utcnow()}
    try:
        result = db.execute(update(model).where(model.id == doc_id).values(**values))
        if result.rowcount == 0:
            db.rollback()
            raise NotFoundError(f"No document with id {doc_id}")
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError(
            message="Another document already uses this (activity_id, user_id, session_id)",
            error="Natural key conflict",
        ) from exc
    return db.get(model, doc_id, populate_existing=True)
