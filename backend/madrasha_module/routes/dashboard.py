from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..middleware import get_current_user
from ..models import User
from ..permissions import can
from ..responses import success
from ..services.dashboard import full_stats, limited_stats


router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("")
def get_dashboard(
    db: Session = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    role = current_user.role.value
    if can(role, "VIEW_FULL_DASHBOARD"):
        return success(full_stats(db))
    if can(role, "VIEW_LIMITED_DASHBOARD"):
        return success(limited_stats(db, current_user))
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
