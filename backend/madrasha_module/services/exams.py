import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from ..models import Exam, Student, Subject
from ..schemas import ExamPayload
from .common import apply_fields, get_or_404, reject_empty


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("student_id", "subject_id", "exam_type", "exam_date", "total_marks", "obtained_marks")


def _check_marks(total_marks: float, obtained_marks: float) -> None:
    if total_marks <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Total marks must be positive")
    if obtained_marks < 0 or obtained_marks > total_marks:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Obtained marks must be between 0 and total marks"
        )


def list_exams(
    db: Session,
    *,
    student_id: int | None = None,
    subject_id: int | None = None,
    exam_type: str | None = None,
    student_ids: list[int] | None = None,
) -> list[Exam]:
    query = db.query(Exam).options(joinedload(Exam.student), joinedload(Exam.subject))
    if student_id is not None:
        query = query.filter(Exam.student_id == student_id)
    if subject_id is not None:
        query = query.filter(Exam.subject_id == subject_id)
    if exam_type:
        query = query.filter(Exam.exam_type == exam_type)
    if student_ids is not None:
        query = query.filter(Exam.student_id.in_(student_ids))
    return query.order_by(Exam.exam_date.desc(), Exam.id.desc()).all()


def get_exam(db: Session, exam_id: int) -> Exam:
    return get_or_404(db, Exam, exam_id, "Exam")


def create_exam(db: Session, payload: ExamPayload) -> Exam:
    fields = payload.model_dump()
    if any(fields[name] in (None, "") for name in REQUIRED_FIELDS):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    _check_marks(payload.total_marks, payload.obtained_marks)
    get_or_404(db, Student, payload.student_id, "Student")
    get_or_404(db, Subject, payload.subject_id, "Subject")

    exam = Exam(**fields)
    db.add(exam)
    db.commit()
    db.refresh(exam)
    logger.info(f"Recorded {exam.exam_type} result for student {exam.student_id}, subject {exam.subject_id}")
    return exam


def update_exam(db: Session, exam_id: int, payload: ExamPayload) -> Exam:
    exam = get_exam(db, exam_id)
    fields = payload.model_dump(exclude_unset=True)
    reject_empty(fields, REQUIRED_FIELDS)
    _check_marks(
        fields.get("total_marks", exam.total_marks),
        fields.get("obtained_marks", exam.obtained_marks),
    )
    if "student_id" in fields:
        get_or_404(db, Student, fields["student_id"], "Student")
    if "subject_id" in fields:
        get_or_404(db, Subject, fields["subject_id"], "Subject")
    apply_fields(exam, fields)
    db.commit()
    db.refresh(exam)
    return exam


def delete_exam(db: Session, exam_id: int) -> None:
    exam = get_exam(db, exam_id)
    db.delete(exam)
    db.commit()
    logger.info(f"Deleted exam {exam_id}")
