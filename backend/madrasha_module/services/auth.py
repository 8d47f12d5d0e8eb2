import logging
import re

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..email_service import EmailDispatchError, EmailService
from ..models import User, UserRole
from ..schemas import UserCreateRequest
from ..security import hash_password, issue_session_token, verify_password
from .common import translate_integrity_errors


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
USER_CONFLICTS = {"email": "Email already exists"}


def normalize_email(value: str) -> str:
    normalized = value.lower().strip()
    if not EMAIL_PATTERN.match(normalized):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")
    return normalized


def login_user(db: Session, *, email: str, password: str) -> tuple[User, str]:
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for {email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return user, issue_session_token(user)


def new_user(*, email: str, password: str, name: str | None, role: UserRole) -> User:
    return User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        name=name,
        role=role,
        is_active=True,
    )


def send_welcome(db: Session, mailer: EmailService, user: User, raw_password: str, *owners: object) -> None:
    """Mail login details for a committed account.

    On a delivery failure the account is deleted again, together with the
    ``owners`` rows created alongside it (a teacher or student record).
    """
    try:
        mailer.send_welcome_email(user.email, user.name or user.email, raw_password)
    except EmailDispatchError as exc:
        logger.error(f"Welcome email to {user.email} failed, removing the new account: {exc}")
        for record in (*owners, user):
            db.delete(record)
        db.commit()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def create_user(db: Session, payload: UserCreateRequest, mailer: EmailService) -> User:
    user = new_user(email=payload.email, password=payload.password, name=payload.name, role=payload.role)
    with translate_integrity_errors(db, USER_CONFLICTS):
        db.add(user)
        db.commit()
    send_welcome(db, mailer, user, payload.password)
    db.refresh(user)
    logger.info(f"Created {user.role.value} account {user.email}")
    return user


def list_users(db: Session, role: UserRole | None = None) -> list[User]:
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role)
    return query.order_by(User.email).all()
