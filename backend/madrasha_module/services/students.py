import logging

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..email_service import EmailService
from ..models import SchoolClass, Student, User, UserRole
from ..schemas import StudentCreateRequest, StudentPayload
from .auth import new_user, send_welcome
from .common import apply_fields, get_or_404, reject_empty, translate_integrity_errors


logger = logging.getLogger(__name__)

STUDENT_CONFLICTS = {
    "roll_number": "Roll number already exists",
    "email": "Email already exists",
}
NON_NULLABLE = ("name", "roll_number", "class_id", "religion", "nationality", "is_active")


def _check_class(db: Session, class_id: int) -> None:
    if db.get(SchoolClass, class_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Selected class does not exist")


def _check_parent(db: Session, parent_user_id: int) -> None:
    parent = db.get(User, parent_user_id)
    if parent is None or parent.role != UserRole.PARENT:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Selected parent account does not exist")


def list_students(
    db: Session,
    *,
    class_id: int | None = None,
    search: str | None = None,
    active: bool | None = None,
) -> list[Student]:
    query = db.query(Student).options(joinedload(Student.school_class))
    if class_id is not None:
        query = query.filter(Student.class_id == class_id)
    if active is not None:
        query = query.filter(Student.is_active.is_(active))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Student.name.ilike(pattern), Student.roll_number.ilike(pattern)))
    return query.order_by(Student.roll_number).all()


def get_student(db: Session, student_id: int) -> Student:
    return get_or_404(db, Student, student_id, "Student")


def students_for_user(db: Session, user: User) -> list[Student]:
    """Student records a student or parent account may see as its own."""
    if user.role == UserRole.STUDENT:
        return db.query(Student).filter(Student.user_id == user.id).all()
    if user.role == UserRole.PARENT:
        return db.query(Student).filter(Student.parent_user_id == user.id).order_by(Student.roll_number).all()
    return []


def find_own_student(db: Session, user: User, student_id: int) -> Student | None:
    """The student record if ``user`` is that student or its parent, else None."""
    student = db.get(Student, student_id)
    if student is None or user.id not in (student.user_id, student.parent_user_id):
        return None
    return student


def create_student(db: Session, payload: StudentCreateRequest, mailer: EmailService) -> Student:
    if not payload.name or not payload.roll_number or payload.class_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Name, roll number, and class are required"
        )
    _check_class(db, payload.class_id)
    if payload.parent_user_id is not None:
        _check_parent(db, payload.parent_user_id)

    fields = payload.model_dump(exclude={"password", "is_active"}, exclude_none=True)
    fields["religion"] = payload.religion or "Islam"
    fields["nationality"] = payload.nationality or "Bangladeshi"
    student = Student(**fields)

    with translate_integrity_errors(db, STUDENT_CONFLICTS):
        if payload.password:
            if not payload.email:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required to create a login"
                )
            student.user = new_user(
                email=payload.email, password=payload.password, name=payload.name, role=UserRole.STUDENT
            )
        db.add(student)
        db.commit()
    if student.user is not None:
        send_welcome(db, mailer, student.user, payload.password, student)
    db.refresh(student)
    logger.info(f"Created student {student.roll_number} ({student.name})")
    return student


def update_student(db: Session, student_id: int, payload: StudentPayload) -> Student:
    student = get_student(db, student_id)
    fields = payload.model_dump(exclude_unset=True)
    reject_empty(fields, NON_NULLABLE)
    if "class_id" in fields:
        _check_class(db, fields["class_id"])
    if fields.get("parent_user_id") is not None:
        _check_parent(db, fields["parent_user_id"])

    with translate_integrity_errors(db, STUDENT_CONFLICTS):
        apply_fields(student, fields)
        db.commit()
    db.refresh(student)
    return student


def deactivate_student(db: Session, student_id: int) -> Student:
    student = get_student(db, student_id)
    student.is_active = False
    if student.user is not None:
        student.user.is_active = False
    db.commit()
    db.refresh(student)
    logger.info(f"Deactivated student {student.roll_number}")
    return student
