from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..email_service import EmailService, get_mailer
from ..middleware import get_current_user, require_permission
from ..models import User
from ..responses import success
from ..schemas import AnnouncementCreateRequest, AnnouncementOut, dump, dump_many
from ..services import announcements as announcement_service


router = APIRouter(prefix="/api/announcements", tags=["Announcements"])


@router.get("")
def get_announcements(
    db: Session = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    announcements = announcement_service.list_announcements(db, current_user.role)
    return success(dump_many(AnnouncementOut, announcements))


@router.post("", status_code=status.HTTP_201_CREATED)
def add_announcement(
    payload: AnnouncementCreateRequest,
    db: Session = Depends(get_db_session),
    mailer: EmailService = Depends(get_mailer),
    _: User = Depends(require_permission("MANAGE_ANNOUNCEMENTS")),
):
    announcement, sent, failed = announcement_service.create_announcement(db, payload, mailer)
    return success(
        dump(AnnouncementOut, announcement),
        "Announcement published",
        notified=sent,
        notifyFailed=failed,
    )


@router.delete("/{announcement_id}")
def remove_announcement(
    announcement_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_ANNOUNCEMENTS")),
):
    announcement_service.delete_announcement(db, announcement_id)
    return success(message="Announcement deleted successfully")
