"""Single-document lookups shared by the routers."""

from sqlalchemy.orm import Session

from flowquest.errors import NotFoundError, ValidationError
from flowquest.identifiers import is_valid_identifier
from flowquest.services.validation import FieldError


def require_identifier(value: str, field: str = "id") -> str:
    if not is_valid_identifier(value):
        raise ValidationError(
            [FieldError(field, f"'{value}' is not a valid identifier")],
            error="Invalid id format",
        )
    return value


def get_or_404(db: Session, model, doc_id: str, label: str):
    """Fetch ``model`` by id: 400 on a malformed id, 404 when absent."""
    require_identifier(doc_id)
    doc = db.get(model, doc_id)
    if doc is None:
        raise NotFoundError(f"{label} with id {doc_id} does not exist", error=f"{label} not found")
    return doc
