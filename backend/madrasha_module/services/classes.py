import logging

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models import SchoolClass, Student, Subject, Teacher
from ..schemas import ClassPayload
from .common import apply_fields, get_or_404, reject_empty, translate_integrity_errors


logger = logging.getLogger(__name__)

CLASS_CONFLICTS = {"name": "Class name already exists"}


def _check_teacher(db: Session, teacher_id: int | None) -> None:
    if teacher_id is not None and db.get(Teacher, teacher_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Selected teacher does not exist")


def list_classes(db: Session) -> list[SchoolClass]:
    return db.query(SchoolClass).options(joinedload(SchoolClass.teacher)).order_by(SchoolClass.name).all()


def class_counts(db: Session) -> dict[int, dict[str, int]]:
    students = dict(db.query(Student.class_id, func.count(Student.id)).group_by(Student.class_id).all())
    subjects = dict(db.query(Subject.class_id, func.count(Subject.id)).group_by(Subject.class_id).all())
    class_ids = set(students) | set(subjects)
    return {
        class_id: {"students": students.get(class_id, 0), "subjects": subjects.get(class_id, 0)}
        for class_id in class_ids
    }


def get_class(db: Session, class_id: int) -> SchoolClass:
    return get_or_404(db, SchoolClass, class_id, "Class")


def create_class(db: Session, payload: ClassPayload) -> SchoolClass:
    if not payload.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Class name is required")
    _check_teacher(db, payload.teacher_id)

    school_class = SchoolClass(
        name=payload.name.strip(),
        section=payload.section or None,
        teacher_id=payload.teacher_id,
        capacity=payload.capacity,
        description=payload.description or None,
    )
    with translate_integrity_errors(db, CLASS_CONFLICTS):
        db.add(school_class)
        db.commit()
    db.refresh(school_class)
    logger.info(f"Created class {school_class.name}")
    return school_class


def update_class(db: Session, class_id: int, payload: ClassPayload) -> SchoolClass:
    school_class = get_class(db, class_id)
    fields = payload.model_dump(exclude_unset=True)
    reject_empty(fields, ("name", "is_active"))
    if "teacher_id" in fields:
        _check_teacher(db, fields["teacher_id"])
    with translate_integrity_errors(db, CLASS_CONFLICTS):
        apply_fields(school_class, fields)
        db.commit()
    db.refresh(school_class)
    return school_class


def delete_class(db: Session, class_id: int) -> None:
    school_class = get_class(db, class_id)
    if school_class.students or school_class.subjects:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete class with enrolled students or subjects",
        )
    db.delete(school_class)
    db.commit()
    logger.info(f"Deleted class {class_id}")
