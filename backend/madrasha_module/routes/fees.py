from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..email_service import EmailService, get_mailer
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..schemas import FeeCreateRequest, FeeOut, FeeUpdateRequest, dump, dump_many
from ..services import fees as fee_service


router = APIRouter(prefix="/api/fees", tags=["Fees"])


@router.get("")
def get_fees(
    class_filter: str | None = Query(default=None, alias="class"),
    status_filter: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_FEES")),
):
    fees = fee_service.list_fees(db, class_filter=class_filter, status_filter=status_filter)
    return success(dump_many(FeeOut, fees))


@router.post("", status_code=status.HTTP_201_CREATED)
def add_fee(
    payload: FeeCreateRequest,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_FEES")),
):
    fee = fee_service.create_fee(db, payload)
    return success(dump(FeeOut, fee), "Fee created successfully")


@router.get("/{fee_id}")
def get_fee(
    fee_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_FEES")),
):
    return success(dump(FeeOut, fee_service.get_fee(db, fee_id)))


@router.put("/{fee_id}")
def edit_fee(
    fee_id: int,
    payload: FeeUpdateRequest,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_FEES")),
):
    fee = fee_service.update_fee(db, fee_id, payload)
    return success(dump(FeeOut, fee), "Fee updated successfully")


@router.post("/{fee_id}/remind")
def remind_fee(
    fee_id: int,
    db: Session = Depends(get_db_session),
    mailer: EmailService = Depends(get_mailer),
    _: User = Depends(require_permission("MANAGE_FEES")),
):
    recipient = fee_service.send_fee_reminder(db, fee_id, mailer)
    return success({"sentTo": recipient}, "Fee reminder sent")
