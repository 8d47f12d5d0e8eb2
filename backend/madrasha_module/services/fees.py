import logging
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload

from ..email_service import EmailDispatchError, EmailService
from ..models import FEE_STATUSES, Fee, Student
from ..schemas import FeeCreateRequest, FeeUpdateRequest
from .common import get_or_404, translate_integrity_errors


logger = logging.getLogger(__name__)

FEE_CONFLICTS = {"receipt_no": "Receipt number already exists"}


def _parse_class_filter(value: str | None) -> int | None:
    if not value or value == "all":
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid class filter") from exc


def _check_status(value: str) -> None:
    if value not in FEE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid fee status. Allowed: {', '.join(FEE_STATUSES)}",
        )


def _fee_query(db: Session):
    return db.query(Fee).options(joinedload(Fee.student).joinedload(Student.school_class))


def list_fees(
    db: Session,
    *,
    class_filter: str | None = None,
    status_filter: str | None = None,
    student_ids: list[int] | None = None,
) -> list[Fee]:
    query = _fee_query(db)
    if status_filter and status_filter != "all":
        query = query.filter(Fee.status == status_filter)
    class_id = _parse_class_filter(class_filter)
    if class_id is not None:
        query = query.join(Fee.student).filter(Student.class_id == class_id)
    if student_ids is not None:
        query = query.filter(Fee.student_id.in_(student_ids))
    return query.order_by(Fee.due_date.desc(), Fee.id.desc()).all()


def get_fee(db: Session, fee_id: int) -> Fee:
    return get_or_404(db, Fee, fee_id, "Fee")


def create_fee(db: Session, payload: FeeCreateRequest) -> Fee:
    if not payload.student_id or not payload.fee_type or not payload.amount or not payload.due_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    if payload.amount < 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amount must be positive")
    get_or_404(db, Student, payload.student_id, "Student")

    fee = Fee(
        student_id=payload.student_id,
        fee_type=payload.fee_type.strip(),
        amount=payload.amount,
        due_date=payload.due_date,
        status="pending",
        remarks=payload.remarks or None,
        paid_amount=0,
    )
    db.add(fee)
    db.commit()
    db.refresh(fee)
    logger.info(f"Created fee invoice {fee.id} ({fee.fee_type}) for student {fee.student_id}")
    return fee


def update_fee(db: Session, fee_id: int, payload: FeeUpdateRequest) -> Fee:
    fee = get_fee(db, fee_id)
    fields = payload.model_dump(exclude_unset=True)

    if payload.status:
        _check_status(payload.status)
        fee.status = payload.status
    if payload.paid_amount is not None:
        if payload.paid_amount < 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Paid amount cannot be negative")
        fee.paid_amount = payload.paid_amount
    if payload.paid_date:
        fee.paid_date = payload.paid_date
    elif payload.status == "paid" and fee.paid_date is None:
        fee.paid_date = date.today()
    if "remarks" in fields:
        fee.remarks = payload.remarks
    if "receipt_no" in fields:
        fee.receipt_no = payload.receipt_no or None

    with translate_integrity_errors(db, FEE_CONFLICTS):
        db.commit()
    db.refresh(fee)
    logger.info(f"Updated fee {fee.id}: status={fee.status}")
    return fee


def reminder_recipient(student: Student) -> str | None:
    if student.email:
        return student.email
    for account in (student.user, student.parent):
        if account is not None and account.is_active:
            return account.email
    return None


def send_fee_reminder(db: Session, fee_id: int, mailer: EmailService) -> str:
    fee = get_fee(db, fee_id)
    if fee.status == "paid":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Fee is already paid")
    recipient = reminder_recipient(fee.student)
    if not recipient:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No email address on record for this student"
        )
    outstanding = max(fee.amount - (fee.paid_amount or 0), 0)
    try:
        mailer.send_fee_reminder_email(recipient, fee.student.name, outstanding, fee.due_date)
    except EmailDispatchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info(f"Fee reminder for fee {fee.id} sent to {recipient}")
    return recipient
