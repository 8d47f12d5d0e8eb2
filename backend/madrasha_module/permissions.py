"""Role-to-capability table for the madrasha administration API."""

from collections.abc import Iterable

from .models import UserRole


ADMIN = UserRole.ADMIN.value
TEACHER = UserRole.TEACHER.value
STUDENT = UserRole.STUDENT.value
PARENT = UserRole.PARENT.value

ROLES = (ADMIN, TEACHER, STUDENT, PARENT)

PERMISSIONS: dict[str, tuple[str, ...]] = {
    # Student management
    "VIEW_STUDENTS": (ADMIN, TEACHER),
    "MANAGE_STUDENTS": (ADMIN,),
    "VIEW_OWN_PROFILE": (ADMIN, TEACHER, STUDENT, PARENT),
    # Teacher management
    "VIEW_TEACHERS": (ADMIN,),
    "MANAGE_TEACHERS": (ADMIN,),
    # Class management
    "VIEW_CLASSES": (ADMIN, TEACHER),
    "MANAGE_CLASSES": (ADMIN,),
    # Fee management
    "VIEW_FEES": (ADMIN, TEACHER),
    "MANAGE_FEES": (ADMIN,),
    "VIEW_OWN_FEES": (STUDENT, PARENT),
    # Attendance
    "VIEW_ATTENDANCE": (ADMIN, TEACHER),
    "MANAGE_ATTENDANCE": (ADMIN, TEACHER),
    "VIEW_OWN_ATTENDANCE": (STUDENT, PARENT),
    # Exams
    "VIEW_EXAMS": (ADMIN, TEACHER),
    "MANAGE_EXAMS": (ADMIN, TEACHER),
    "VIEW_OWN_EXAMS": (STUDENT, PARENT),
    # Dashboard
    "VIEW_FULL_DASHBOARD": (ADMIN,),
    "VIEW_LIMITED_DASHBOARD": (TEACHER, STUDENT, PARENT),
    # Administration
    "MANAGE_USERS": (ADMIN,),
    "MANAGE_ANNOUNCEMENTS": (ADMIN,),
    "MANAGE_ACADEMIC_YEARS": (ADMIN,),
    "UPLOAD_FILES": (ADMIN, TEACHER),
}


def has_permission(user_role: str, required_roles: Iterable[str]) -> bool:
    return user_role in required_roles


def can(user_role: str, capability: str) -> bool:
    return has_permission(user_role, PERMISSIONS[capability])
