import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..models import SchoolClass, Subject
from ..schemas import SubjectPayload
from .common import get_or_404, translate_integrity_errors


logger = logging.getLogger(__name__)

SUBJECT_CONFLICTS = {"code": "Subject code already exists"}


def _require_fields(payload: SubjectPayload) -> None:
    if not payload.name or payload.class_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Subject name and class are required")


def _check_class(db: Session, payload: SubjectPayload) -> None:
    if db.get(SchoolClass, payload.class_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Selected class does not exist")


def _check_code_free(db: Session, code: str | None, subject_id: int | None = None) -> None:
    if not code:
        return
    query = db.query(Subject).filter(Subject.code == code)
    if subject_id is not None:
        query = query.filter(Subject.id != subject_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Subject code already exists")


def list_subjects(db: Session, class_id: int | None = None) -> list[Subject]:
    query = db.query(Subject).join(Subject.school_class)
    if class_id is not None:
        query = query.filter(Subject.class_id == class_id)
    return query.order_by(SchoolClass.name, Subject.name).all()


def get_subject(db: Session, subject_id: int) -> Subject:
    return get_or_404(db, Subject, subject_id, "Subject")


def create_subject(db: Session, payload: SubjectPayload) -> Subject:
    _require_fields(payload)
    _check_class(db, payload)
    _check_code_free(db, payload.code)
    subject = Subject(
        name=payload.name,
        code=payload.code or None,
        class_id=payload.class_id,
        description=payload.description or None,
        is_active=True,
    )
    with translate_integrity_errors(db, SUBJECT_CONFLICTS):
        db.add(subject)
        db.commit()
    db.refresh(subject)
    logger.info(f"Created subject {subject.name} for class {subject.class_id}")
    return subject


def update_subject(db: Session, subject_id: int, payload: SubjectPayload) -> Subject:
    _require_fields(payload)
    subject = get_subject(db, subject_id)
    _check_class(db, payload)
    if payload.code and payload.code != subject.code:
        _check_code_free(db, payload.code, subject_id)

    subject.name = payload.name
    subject.code = payload.code or None
    subject.class_id = payload.class_id
    subject.description = payload.description or None
    if payload.is_active is not None:
        subject.is_active = payload.is_active
    with translate_integrity_errors(db, SUBJECT_CONFLICTS):
        db.commit()
    db.refresh(subject)
    return subject


def delete_subject(db: Session, subject_id: int) -> None:
    subject = get_subject(db, subject_id)
    if subject.exams:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete subject with existing exam records",
        )
    db.delete(subject)
    db.commit()
    logger.info(f"Deleted subject {subject_id}")
