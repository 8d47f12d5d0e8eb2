from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..middleware import get_current_user, require_permission
from ..models import User
from ..responses import success
from ..schemas import AcademicYearCreateRequest, AcademicYearOut, dump, dump_many
from ..services import academic_years as academic_year_service


router = APIRouter(prefix="/api/academic-years", tags=["Academic years"])


@router.get("")
def get_academic_years(
    db: Session = Depends(get_db_session),
    _: User = Depends(get_current_user),
):
    return success(dump_many(AcademicYearOut, academic_year_service.list_academic_years(db)))


@router.post("", status_code=status.HTTP_201_CREATED)
def add_academic_year(
    payload: AcademicYearCreateRequest,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_ACADEMIC_YEARS")),
):
    academic_year = academic_year_service.create_academic_year(db, payload)
    return success(dump(AcademicYearOut, academic_year), "Academic year created successfully")


@router.post("/{year_id}/activate")
def activate_academic_year(
    year_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_ACADEMIC_YEARS")),
):
    academic_year = academic_year_service.activate_academic_year(db, year_id)
    return success(dump(AcademicYearOut, academic_year), f"Academic year {academic_year.year} is now active")
