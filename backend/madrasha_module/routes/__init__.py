from fastapi import APIRouter

from . import (
    academic_years,
    announcements,
    attendance,
    auth,
    classes,
    dashboard,
    exams,
    fees,
    files,
    me,
    students,
    subjects,
    teachers,
)


router = APIRouter()

for module in (
    auth,
    students,
    teachers,
    classes,
    subjects,
    fees,
    attendance,
    exams,
    me,
    announcements,
    academic_years,
    dashboard,
    files,
):
    router.include_router(module.router)
