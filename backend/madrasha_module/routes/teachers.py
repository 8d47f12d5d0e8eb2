from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..email_service import EmailService, get_mailer
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..schemas import TeacherCreateRequest, TeacherOut, TeacherPayload, dump, dump_many
from ..services import teachers as teacher_service


router = APIRouter(prefix="/api/teachers", tags=["Teachers"])


@router.get("")
def get_teachers(
    search: str | None = None,
    active: bool | None = None,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_TEACHERS")),
):
    teachers = dump_many(TeacherOut, teacher_service.list_teachers(db, search=search, active=active))
    return success(teachers, teachers=teachers)


@router.post("", status_code=status.HTTP_201_CREATED)
def add_teacher(
    payload: TeacherCreateRequest,
    db: Session = Depends(get_db_session),
    mailer: EmailService = Depends(get_mailer),
    _: User = Depends(require_permission("MANAGE_TEACHERS")),
):
    teacher = teacher_service.create_teacher(db, payload, mailer)
    return success(dump(TeacherOut, teacher), "Teacher created successfully")


@router.get("/{teacher_id}")
def get_teacher(
    teacher_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_TEACHERS")),
):
    return success(dump(TeacherOut, teacher_service.get_teacher(db, teacher_id)))


@router.put("/{teacher_id}")
def edit_teacher(
    teacher_id: int,
    payload: TeacherPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_TEACHERS")),
):
    teacher = teacher_service.update_teacher(db, teacher_id, payload)
    return success(dump(TeacherOut, teacher), "Teacher updated successfully")


@router.delete("/{teacher_id}")
def remove_teacher(
    teacher_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_TEACHERS")),
):
    teacher = teacher_service.deactivate_teacher(db, teacher_id)
    return success(dump(TeacherOut, teacher), "Teacher deactivated successfully")
