from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..schemas import AttendanceOut, ExamOut, FeeOut, dump_many
from ..services.attendance import list_attendance
from ..services.exams import list_exams
from ..services.fees import list_fees
from ..services.students import students_for_user


router = APIRouter(prefix="/api/me", tags=["Self service"])


def _own_student_ids(db: Session, user: User) -> list[int]:
    return [student.id for student in students_for_user(db, user)]


@router.get("/fees")
def my_fees(
    db: Session = Depends(get_db_session),
    current_user: User = Depends(require_permission("VIEW_OWN_FEES")),
):
    fees = list_fees(db, student_ids=_own_student_ids(db, current_user))
    return success(dump_many(FeeOut, fees))


@router.get("/attendance")
def my_attendance(
    db: Session = Depends(get_db_session),
    current_user: User = Depends(require_permission("VIEW_OWN_ATTENDANCE")),
):
    records = list_attendance(db, student_ids=_own_student_ids(db, current_user))
    return success(dump_many(AttendanceOut, records))


@router.get("/exams")
def my_exams(
    db: Session = Depends(get_db_session),
    current_user: User = Depends(require_permission("VIEW_OWN_EXAMS")),
):
    exams = list_exams(db, student_ids=_own_student_ids(db, current_user))
    return success(dump_many(ExamOut, exams))
