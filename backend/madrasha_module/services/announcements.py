import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..email_service import EmailDispatchError, EmailService
from ..models import ANNOUNCEMENT_TARGETS, Announcement, User, UserRole
from ..schemas import AnnouncementCreateRequest
from .common import get_or_404


logger = logging.getLogger(__name__)


def list_announcements(db: Session, role: UserRole, limit: int | None = None) -> list[Announcement]:
    query = db.query(Announcement).filter(Announcement.is_active.is_(True))
    if role != UserRole.ADMIN:
        query = query.filter(Announcement.target_role.in_(("all", role.value)))
    query = query.order_by(Announcement.created_at.desc(), Announcement.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def _recipients(db: Session, target_role: str) -> list[User]:
    query = db.query(User).filter(User.is_active.is_(True))
    if target_role != "all":
        query = query.filter(User.role == UserRole(target_role))
    return query.all()


def notify_recipients(db: Session, announcement: Announcement, mailer: EmailService) -> tuple[int, int]:
    sent = failed = 0
    for user in _recipients(db, announcement.target_role):
        try:
            mailer.send_announcement_email(user.email, announcement.title, announcement.content)
            sent += 1
        except EmailDispatchError as exc:
            logger.error(f"Announcement {announcement.id} not delivered to {user.email}: {exc}")
            failed += 1
    return sent, failed


def create_announcement(
    db: Session, payload: AnnouncementCreateRequest, mailer: EmailService
) -> tuple[Announcement, int, int]:
    if payload.target_role not in ANNOUNCEMENT_TARGETS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid target role. Allowed: {', '.join(ANNOUNCEMENT_TARGETS)}",
        )
    announcement = Announcement(
        title=payload.title.strip(),
        content=payload.content,
        target_role=payload.target_role,
        is_active=True,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    logger.info(f"Published announcement {announcement.id} for {announcement.target_role}")

    sent = failed = 0
    if payload.notify:
        sent, failed = notify_recipients(db, announcement, mailer)
    return announcement, sent, failed


def delete_announcement(db: Session, announcement_id: int) -> None:
    announcement = get_or_404(db, Announcement, announcement_id, "Announcement")
    db.delete(announcement)
    db.commit()
