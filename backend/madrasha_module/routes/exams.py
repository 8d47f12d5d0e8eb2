from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..schemas import ExamOut, ExamPayload, dump, dump_many
from ..services import exams as exam_service


router = APIRouter(prefix="/api/exams", tags=["Exams"])


@router.get("")
def get_exams(
    student_id: int | None = Query(default=None, alias="studentId"),
    subject_id: int | None = Query(default=None, alias="subjectId"),
    exam_type: str | None = Query(default=None, alias="examType"),
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_EXAMS")),
):
    exams = exam_service.list_exams(db, student_id=student_id, subject_id=subject_id, exam_type=exam_type)
    return success(dump_many(ExamOut, exams))


@router.post("", status_code=status.HTTP_201_CREATED)
def add_exam(
    payload: ExamPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_EXAMS")),
):
    exam = exam_service.create_exam(db, payload)
    return success(dump(ExamOut, exam), "Exam result saved successfully")


@router.put("/{exam_id}")
def edit_exam(
    exam_id: int,
    payload: ExamPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_EXAMS")),
):
    exam = exam_service.update_exam(db, exam_id, payload)
    return success(dump(ExamOut, exam), "Exam result updated successfully")


@router.delete("/{exam_id}")
def remove_exam(
    exam_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_EXAMS")),
):
    exam_service.delete_exam(db, exam_id)
    return success(message="Exam result deleted successfully")
