from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..email_service import EmailService, get_mailer
from ..middleware import get_current_user, require_permission
from ..models import User, UserRole
from ..responses import success
from ..schemas import LoginRequest, UserCreateRequest, UserOut, dump, dump_many
from ..services import auth as auth_service


router = APIRouter(prefix="/api", tags=["Auth"])


@router.post("/auth/login")
def login(payload: LoginRequest, db: Session = Depends(get_db_session)):
    user, token = auth_service.login_user(db, email=payload.email, password=payload.password)
    return success(
        {
            "accessToken": token,
            "tokenType": "bearer",
            "role": user.role.value,
            "user": dump(UserOut, user),
        },
        "Login successful",
    )


@router.get("/auth/me")
def me(current_user: User = Depends(get_current_user)):
    return success(dump(UserOut, current_user))


@router.get("/users")
def get_users(
    role: UserRole | None = Query(default=None),
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_USERS")),
):
    return success(dump_many(UserOut, auth_service.list_users(db, role)))


@router.post("/users", status_code=status.HTTP_201_CREATED)
def add_user(
    payload: UserCreateRequest,
    db: Session = Depends(get_db_session),
    mailer: EmailService = Depends(get_mailer),
    _: User = Depends(require_permission("MANAGE_USERS")),
):
    user = auth_service.create_user(db, payload, mailer)
    return success(dump(UserOut, user), "User created successfully")
