from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..email_service import EmailService, get_mailer
from ..middleware import get_current_user, require_permission
from ..models import User
from ..permissions import can
from ..responses import success
from ..schemas import StudentCreateRequest, StudentDetailOut, StudentOut, StudentPayload, dump, dump_many
from ..services import students as student_service


router = APIRouter(prefix="/api/students", tags=["Students"])


@router.get("")
def get_students(
    class_id: int | None = Query(default=None, alias="classId"),
    search: str | None = None,
    active: bool | None = None,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_STUDENTS")),
):
    students = student_service.list_students(db, class_id=class_id, search=search, active=active)
    return success(dump_many(StudentOut, students))


@router.post("", status_code=status.HTTP_201_CREATED)
def add_student(
    payload: StudentCreateRequest,
    db: Session = Depends(get_db_session),
    mailer: EmailService = Depends(get_mailer),
    _: User = Depends(require_permission("MANAGE_STUDENTS")),
):
    student = student_service.create_student(db, payload, mailer)
    return success(dump(StudentOut, student), "Student created successfully")


@router.get("/{student_id}")
def get_student(
    student_id: int,
    db: Session = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    role = current_user.role.value
    if can(role, "VIEW_STUDENTS"):
        return success(dump(StudentDetailOut, student_service.get_student(db, student_id)))

    # Unknown and foreign ids both answer 403.
    student = None
    if can(role, "VIEW_OWN_PROFILE"):
        student = student_service.find_own_student(db, current_user, student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return success(dump(StudentDetailOut, student))


@router.put("/{student_id}")
def edit_student(
    student_id: int,
    payload: StudentPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_STUDENTS")),
):
    student = student_service.update_student(db, student_id, payload)
    return success(dump(StudentOut, student), "Student updated successfully")


@router.delete("/{student_id}")
def remove_student(
    student_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_STUDENTS")),
):
    student = student_service.deactivate_student(db, student_id)
    return success(dump(StudentOut, student), "Student deactivated successfully")
