from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..middleware import require_permission
from ..models import User
from ..responses import success
from ..schemas import ClassDetailOut, ClassOut, ClassPayload, dump
from ..services import classes as class_service


router = APIRouter(prefix="/api/classes", tags=["Classes"])

EMPTY_COUNTS = {"students": 0, "subjects": 0}


@router.get("")
def get_classes(
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_CLASSES")),
):
    counts = class_service.class_counts(db)
    classes = [
        {**dump(ClassOut, school_class), "_count": counts.get(school_class.id, EMPTY_COUNTS)}
        for school_class in class_service.list_classes(db)
    ]
    return success(classes, classes=classes)


@router.post("", status_code=status.HTTP_201_CREATED)
def add_class(
    payload: ClassPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_CLASSES")),
):
    school_class = class_service.create_class(db, payload)
    return success(dump(ClassOut, school_class), "Class created successfully")


@router.get("/{class_id}")
def get_class(
    class_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("VIEW_CLASSES")),
):
    return success(dump(ClassDetailOut, class_service.get_class(db, class_id)))


@router.put("/{class_id}")
def edit_class(
    class_id: int,
    payload: ClassPayload,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_CLASSES")),
):
    school_class = class_service.update_class(db, class_id, payload)
    return success(dump(ClassOut, school_class), "Class updated successfully")


@router.delete("/{class_id}")
def remove_class(
    class_id: int,
    db: Session = Depends(get_db_session),
    _: User = Depends(require_permission("MANAGE_CLASSES")),
):
    class_service.delete_class(db, class_id)
    return success(message="Class deleted successfully")
