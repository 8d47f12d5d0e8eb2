from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from .config import settings
from .models import User


TOKEN_ISSUER = "darul-abraar-madrasha"
REQUIRED_CLAIMS = ["sub", "uid", "role", "iat", "exp"]


class AuthError(Exception):
    pass


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    email: str
    role: str


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password must not be empty")
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """False for blank input or a stored value that is not a bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def issue_session_token(user: User, lifetime: timedelta | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + (lifetime if lifetime is not None else timedelta(minutes=settings.jwt_exp_minutes))
    claims = {
        "iss": TOKEN_ISSUER,
        "sub": user.email,
        "uid": user.id,
        "role": user.role.value,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_session_token(token: str) -> SessionClaims:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=TOKEN_ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Session expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid session token") from exc
    if not isinstance(claims["uid"], int):
        raise AuthError("Invalid session token")
    return SessionClaims(user_id=claims["uid"], email=claims["sub"], role=claims["role"])
