import logging

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ..email_service import EmailService
from ..models import Teacher, UserRole
from ..schemas import TeacherCreateRequest, TeacherPayload
from .auth import new_user, send_welcome
from .common import apply_fields, get_or_404, reject_empty, translate_integrity_errors


logger = logging.getLogger(__name__)

TEACHER_CONFLICTS = {
    "employee_id": "Employee ID already exists",
    "email": "Email already exists",
}
NON_NULLABLE = ("name", "employee_id", "is_active")


def list_teachers(db: Session, *, search: str | None = None, active: bool | None = None) -> list[Teacher]:
    query = db.query(Teacher).options(selectinload(Teacher.classes))
    if active is not None:
        query = query.filter(Teacher.is_active.is_(active))
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Teacher.name.ilike(pattern),
                Teacher.employee_id.ilike(pattern),
                Teacher.designation.ilike(pattern),
                Teacher.subjects.ilike(pattern),
            )
        )
    return query.order_by(Teacher.employee_id).all()


def get_teacher(db: Session, teacher_id: int) -> Teacher:
    return get_or_404(db, Teacher, teacher_id, "Teacher")


def create_teacher(db: Session, payload: TeacherCreateRequest, mailer: EmailService) -> Teacher:
    if not payload.name or not payload.employee_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name and employee ID are required")

    teacher = Teacher(**payload.model_dump(exclude={"password", "is_active"}, exclude_none=True))
    if payload.is_active is not None:
        teacher.is_active = payload.is_active

    with translate_integrity_errors(db, TEACHER_CONFLICTS):
        if payload.password:
            if not payload.email:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required to create a login"
                )
            teacher.user = new_user(
                email=payload.email, password=payload.password, name=payload.name, role=UserRole.TEACHER
            )
        db.add(teacher)
        db.commit()
    if teacher.user is not None:
        send_welcome(db, mailer, teacher.user, payload.password, teacher)
    db.refresh(teacher)
    logger.info(f"Created teacher {teacher.employee_id} ({teacher.name})")
    return teacher


def update_teacher(db: Session, teacher_id: int, payload: TeacherPayload) -> Teacher:
    teacher = get_teacher(db, teacher_id)
    fields = payload.model_dump(exclude_unset=True)
    reject_empty(fields, NON_NULLABLE)
    with translate_integrity_errors(db, TEACHER_CONFLICTS):
        apply_fields(teacher, fields)
        db.commit()
    db.refresh(teacher)
    return teacher


def deactivate_teacher(db: Session, teacher_id: int) -> Teacher:
    teacher = get_teacher(db, teacher_id)
    teacher.is_active = False
    if teacher.user is not None:
        teacher.user.is_active = False
    db.commit()
    db.refresh(teacher)
    logger.info(f"Deactivated teacher {teacher.employee_id}")
    return teacher
