import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database import is_foreign_key_violation, is_unique_violation, violated_column


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


def get_or_404(db: Session, model: type[ModelT], object_id: int, label: str) -> ModelT:
    obj = db.get(model, object_id)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return obj


def reject_empty(fields: dict[str, Any], required: Iterable[str]) -> None:
    for name in required:
        if name in fields and fields[name] in (None, ""):
            label = name.replace("_", " ").capitalize()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} cannot be empty")


def apply_fields(obj: Any, fields: dict[str, Any]) -> None:
    for name, value in fields.items():
        setattr(obj, name, value)


@contextmanager
def translate_integrity_errors(
    db: Session,
    conflicts: dict[str, str],
    default: str = "Record already exists",
) -> Iterator[None]:
    """Roll back and turn constraint violations into 409/400 responses."""
    try:
        yield
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            column = violated_column(exc)
            logger.info(f"Unique constraint violated on {column}")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflicts.get(column, default)) from exc
        if is_foreign_key_violation(exc):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Referenced record does not exist"
            ) from exc
        logger.error(f"Integrity error: {exc.orig}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid data") from exc
