from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..schemas import SubjectDetailOut, SubjectOut, SubjectPayload, dump, dump_many
from ..services import subjects as subject_service


router = APIRouter(prefix="/api/subjects", tags=["Subjects"])


@router.get("")
def get_subjects(
    class_id: int | None = Query(default=None, alias="classId"),
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_CLASSES")),
):
    subjects = dump_many(SubjectOut, subject_service.list_subjects(db, class_id))
    return success(subjects, subjects=subjects)


@router.post("", status_code=status.HTTP_201_CREATED)
def add_subject(
    payload: SubjectPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_CLASSES")),
):
    subject = dump(SubjectOut, subject_service.create_subject(db, payload))
    return success(subject, "Subject created successfully", subject=subject)


@router.get("/{subject_id}")
def get_subject(
    subject_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_CLASSES")),
):
    subject = dump(SubjectDetailOut, subject_service.get_subject(db, subject_id))
    return success(subject, subject=subject)


@router.put("/{subject_id}")
def edit_subject(
    subject_id: int,
    payload: SubjectPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_CLASSES")),
):
    subject = dump(SubjectOut, subject_service.update_subject(db, subject_id, payload))
    return success(subject, "Subject updated successfully", subject=subject)


@router.delete("/{subject_id}")
def remove_subject(
    subject_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_CLASSES")),
):
    subject_service.delete_subject(db, subject_id)
    return success(message="Subject deleted successfully")
