from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ..models import AcademicYear
from ..schemas import AcademicYearCreateRequest
from .common import get_or_404, translate_integrity_errors


ACADEMIC_YEAR_CONFLICTS = {"year": "Academic year already exists"}


def list_academic_years(db: Session) -> list[AcademicYear]:
    return db.query(AcademicYear).order_by(AcademicYear.start_date.desc()).all()


def _deactivate_others(db: Session, keep_id: int | None = None) -> None:
    query = db.query(AcademicYear).filter(AcademicYear.is_active.is_(True))
    if keep_id is not None:
        query = query.filter(AcademicYear.id != keep_id)
    for year in query.all():
        year.is_active = False


def create_academic_year(db: Session, payload: AcademicYearCreateRequest) -> AcademicYear:
    if payload.end_date <= payload.start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be after start date")
    academic_year = AcademicYear(
        year=payload.year.strip(),
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=payload.is_active,
    )
    with translate_integrity_errors(db, ACADEMIC_YEAR_CONFLICTS):
        if payload.is_active:
            _deactivate_others(db)
        db.add(academic_year)
        db.commit()
    db.refresh(academic_year)
    return academic_year


def activate_academic_year(db: Session, year_id: int) -> AcademicYear:
    academic_year = get_or_404(db, AcademicYear, year_id, "Academic year")
    _deactivate_others(db, keep_id=academic_year.id)
    academic_year.is_active = True
    db.commit()
    db.refresh(academic_year)
    return academic_year
