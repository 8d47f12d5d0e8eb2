from datetime import date, timedelta
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Attendance, Exam, Fee, SchoolClass, Student, Teacher, User, UserRole
from ..schemas import AnnouncementOut, dump_many
from .announcements import list_announcements
from .students import students_for_user


RECENT_EXAM_DAYS = 7


def full_stats(db: Session, today: date | None = None) -> dict[str, Any]:
    today = today or date.today()
    total_revenue = db.query(func.sum(Fee.amount)).filter(Fee.status == "paid").scalar()
    return {
        "studentsCount": db.query(Student).filter(Student.is_active.is_(True)).count(),
        "teachersCount": db.query(Teacher).filter(Teacher.is_active.is_(True)).count(),
        "classesCount": db.query(SchoolClass).filter(SchoolClass.is_active.is_(True)).count(),
        "totalRevenue": total_revenue or 0,
        "pendingFeesCount": db.query(Fee).filter(Fee.status == "pending").count(),
        "todayAttendanceCount": db.query(Attendance).filter(Attendance.attendance_date == today).count(),
        "recentExamsCount": db.query(Exam)
        .filter(Exam.exam_date >= today - timedelta(days=RECENT_EXAM_DAYS))
        .count(),
    }


def limited_stats(db: Session, user: User, today: date | None = None) -> dict[str, Any]:
    today = today or date.today()
    stats: dict[str, Any] = {
        "role": user.role.value,
        "announcements": dump_many(AnnouncementOut, list_announcements(db, user.role, limit=5)),
    }
    if user.role == UserRole.TEACHER:
        class_ids = [
            row[0]
            for row in db.query(SchoolClass.id).join(SchoolClass.teacher).filter(Teacher.user_id == user.id).all()
        ]
        stats["myClassesCount"] = len(class_ids)
        stats["myStudentsCount"] = (
            db.query(Student).filter(Student.class_id.in_(class_ids), Student.is_active.is_(True)).count()
            if class_ids
            else 0
        )
        stats["todayAttendanceCount"] = db.query(Attendance).filter(Attendance.attendance_date == today).count()
        return stats

    student_ids = [student.id for student in students_for_user(db, user)]
    stats["studentsCount"] = len(student_ids)
    stats["pendingFeesCount"] = (
        db.query(Fee).filter(Fee.student_id.in_(student_ids), Fee.status != "paid").count() if student_ids else 0
    )
    stats["recentExamsCount"] = (
        db.query(Exam)
        .filter(Exam.student_id.in_(student_ids), Exam.exam_date >= today - timedelta(days=RECENT_EXAM_DAYS))
        .count()
        if student_ids
        else 0
    )
    return stats
