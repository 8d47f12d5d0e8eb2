import logging
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from ..models import ATTENDANCE_STATUSES, Attendance, Student
from ..schemas import AttendanceMarkRequest
from .common import translate_integrity_errors


logger = logging.getLogger(__name__)

ATTENDANCE_CONFLICTS = {"student_id": "Attendance already marked for this date"}


def list_attendance(
    db: Session,
    *,
    on_date: date | None = None,
    student_id: int | None = None,
    class_id: int | None = None,
    student_ids: list[int] | None = None,
) -> list[Attendance]:
    query = db.query(Attendance).options(joinedload(Attendance.student))
    if on_date is not None:
        query = query.filter(Attendance.attendance_date == on_date)
    if student_id is not None:
        query = query.filter(Attendance.student_id == student_id)
    if class_id is not None:
        query = query.join(Attendance.student).filter(Student.class_id == class_id)
    if student_ids is not None:
        query = query.filter(Attendance.student_id.in_(student_ids))
    return query.order_by(Attendance.attendance_date.desc(), Attendance.student_id).all()


def mark_attendance(db: Session, payload: AttendanceMarkRequest) -> list[Attendance]:
    """Record one status per student for a day; re-marking overwrites."""
    on_date = payload.date or date.today()
    for entry in payload.records:
        if entry.status not in ATTENDANCE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid attendance status. Allowed: {', '.join(ATTENDANCE_STATUSES)}",
            )

    student_ids = {entry.student_id for entry in payload.records}
    known = {row[0] for row in db.query(Student.id).filter(Student.id.in_(student_ids)).all()}
    missing = sorted(student_ids - known)
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student not found: {', '.join(str(i) for i in missing)}",
        )

    existing = {
        record.student_id: record
        for record in db.query(Attendance)
        .filter(Attendance.attendance_date == on_date, Attendance.student_id.in_(student_ids))
        .all()
    }
    marked = []
    with translate_integrity_errors(db, ATTENDANCE_CONFLICTS):
        for entry in payload.records:
            record = existing.get(entry.student_id)
            if record is None:
                record = Attendance(student_id=entry.student_id, attendance_date=on_date)
                db.add(record)
                existing[entry.student_id] = record
            record.status = entry.status
            record.remarks = entry.remarks
            marked.append(record)
        db.commit()
    for record in marked:
        db.refresh(record)
    logger.info(f"Marked attendance for {len(student_ids)} students on {on_date.isoformat()}")
    return list({record.student_id: record for record in marked}.values())
