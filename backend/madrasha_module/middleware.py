import logging
from collections.abc import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db_session
from .models import User
from .permissions import PERMISSIONS, has_permission
from .security import AuthError, SessionClaims, read_session_token


logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def session_claims(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> SessionClaims:
    # HTTPBearer yields None for a missing header and for any non-Bearer scheme.
    if credentials is None:
        raise _unauthorized("Unauthorized")
    try:
        return read_session_token(credentials.credentials)
    except AuthError as exc:
        raise _unauthorized(str(exc)) from exc


def get_current_user(
    claims: SessionClaims = Depends(session_claims),
    db: Session = Depends(get_db_session),
) -> User:
    """The active account a session token was issued to."""
    user = db.get(User, claims.user_id)
    if user is None or not user.is_active or user.email != claims.email:
        raise _unauthorized("Invalid user")
    if user.role.value != claims.role:
        logger.info(f"Rejected stale session for {user.email}: role is now {user.role.value}")
        raise _unauthorized("Session expired")
    return user


def require_permission(capability: str) -> Callable:
    allowed_roles = PERMISSIONS[capability]

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(current_user.role.value, allowed_roles):
            logger.warning(f"Denied {capability} to {current_user.email} ({current_user.role.value})")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return dependency
