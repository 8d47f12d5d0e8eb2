from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..schemas import AttendanceMarkRequest, AttendanceOut, dump_many
from ..services import attendance as attendance_service


router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


@router.get("")
def get_attendance(
    on_date: date | None = Query(default=None, alias="date"),
    student_id: int | None = Query(default=None, alias="studentId"),
    class_id: int | None = Query(default=None, alias="classId"),
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_ATTENDANCE")),
):
    records = attendance_service.list_attendance(db, on_date=on_date, student_id=student_id, class_id=class_id)
    return success(dump_many(AttendanceOut, records))


@router.post("")
def mark_attendance(
    payload: AttendanceMarkRequest,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_ATTENDANCE")),
):
    records = attendance_service.mark_attendance(db, payload)
    return success(dump_many(AttendanceOut, records), f"Attendance saved for {len(records)} students")
