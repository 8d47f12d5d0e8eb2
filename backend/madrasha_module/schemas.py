import datetime as dt
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import UserRole


def _to_date(value: Any) -> Any:
    # Browsers post either "YYYY-MM-DD" or a full ISO timestamp.
    if value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


FlexibleDate = Annotated[dt.date, BeforeValidator(_to_date)]
OptionalDate = Annotated[dt.date | None, BeforeValidator(_to_date)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def dump(schema: type[BaseModel], obj: Any) -> dict[str, Any]:
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def dump_many(schema: type[BaseModel], objs) -> list[dict[str, Any]]:
    return [dump(schema, obj) for obj in objs]


# --- Auth ---

class LoginRequest(BaseModel):
    email: str = Field(min_length=5, max_length=255)
    password: str = Field(min_length=1)


class UserCreateRequest(CamelModel):
    email: str = Field(min_length=5, max_length=255)
    password: str = Field(min_length=6)
    name: str | None = None
    role: UserRole


class UserOut(CamelModel):
    id: int
    email: str
    name: str | None = None
    role: UserRole
    is_active: bool


# --- Nested summaries ---

class ClassBrief(CamelModel):
    id: int
    name: str
    section: str | None = None


class TeacherBrief(CamelModel):
    id: int
    name: str
    employee_id: str
    designation: str | None = None


class StudentBrief(CamelModel):
    id: int
    name: str
    roll_number: str
    class_id: int


class SubjectBrief(CamelModel):
    id: int
    name: str
    code: str | None = None


# --- Records ---

class FeeRecord(CamelModel):
    id: int
    student_id: int
    fee_type: str
    amount: float
    due_date: dt.date
    paid_date: dt.date | None = None
    paid_amount: float
    status: str
    receipt_no: str | None = None
    remarks: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime


class AttendanceRecord(CamelModel):
    id: int
    student_id: int
    date: dt.date = Field(validation_alias="attendance_date")
    status: str
    remarks: str | None = None


class ExamRecord(CamelModel):
    id: int
    student_id: int
    subject_id: int
    exam_type: str
    exam_date: dt.date
    total_marks: float
    obtained_marks: float
    grade: str | None = None
    subject: SubjectBrief | None = None


# --- Students ---

class StudentPayload(CamelModel):
    name: str | None = None
    roll_number: str | None = None
    class_id: int | None = None
    parent_user_id: int | None = None
    father_name: str | None = None
    mother_name: str | None = None
    date_of_birth: OptionalDate = None
    gender: str | None = None
    blood_group: str | None = None
    religion: str | None = None
    nationality: str | None = None
    contact_number: str | None = None
    email: str | None = None
    present_address: str | None = None
    permanent_address: str | None = None
    guardian_name: str | None = None
    guardian_phone: str | None = None
    guardian_relation: str | None = None
    photo_path: str | None = None
    is_active: bool | None = None


class StudentCreateRequest(StudentPayload):
    password: str | None = Field(default=None, min_length=6)


class StudentOut(CamelModel):
    id: int
    user_id: int | None = None
    parent_user_id: int | None = None
    name: str
    roll_number: str
    class_id: int
    father_name: str | None = None
    mother_name: str | None = None
    date_of_birth: dt.date | None = None
    gender: str | None = None
    blood_group: str | None = None
    religion: str
    nationality: str
    contact_number: str | None = None
    email: str | None = None
    present_address: str | None = None
    permanent_address: str | None = None
    guardian_name: str | None = None
    guardian_phone: str | None = None
    guardian_relation: str | None = None
    photo_path: str | None = None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime
    school_class: ClassBrief | None = Field(default=None, validation_alias="school_class", serialization_alias="class")


class StudentDetailOut(StudentOut):
    fees: list[FeeRecord] = []
    attendances: list[AttendanceRecord] = []
    exams: list[ExamRecord] = []


# --- Teachers ---

class TeacherPayload(CamelModel):
    name: str | None = None
    employee_id: str | None = None
    designation: str | None = None
    qualification: str | None = None
    specialization: str | None = None
    subjects: str | None = None
    date_of_birth: OptionalDate = None
    gender: str | None = None
    contact_number: str | None = None
    email: str | None = None
    present_address: str | None = None
    permanent_address: str | None = None
    joining_date: OptionalDate = None
    salary: float | None = None
    is_active: bool | None = None


class TeacherCreateRequest(TeacherPayload):
    password: str | None = Field(default=None, min_length=6)


class TeacherOut(CamelModel):
    id: int
    user_id: int | None = None
    name: str
    employee_id: str
    designation: str | None = None
    qualification: str | None = None
    specialization: str | None = None
    subjects: str | None = None
    date_of_birth: dt.date | None = None
    gender: str | None = None
    contact_number: str | None = None
    email: str | None = None
    present_address: str | None = None
    permanent_address: str | None = None
    joining_date: dt.date | None = None
    salary: float | None = None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime
    classes: list[ClassBrief] = []


# --- Classes & subjects ---

class ClassPayload(CamelModel):
    name: str | None = None
    section: str | None = None
    teacher_id: int | None = None
    capacity: int | None = None
    description: str | None = None
    is_active: bool | None = None


class ClassOut(CamelModel):
    id: int
    name: str
    section: str | None = None
    teacher_id: int | None = None
    capacity: int | None = None
    description: str | None = None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime
    teacher: TeacherBrief | None = None


class ClassDetailOut(ClassOut):
    students: list[StudentBrief] = []
    subjects: list[SubjectBrief] = []


class SubjectPayload(CamelModel):
    name: str | None = None
    code: str | None = None
    class_id: int | None = None
    description: str | None = None
    is_active: bool | None = None


class SubjectOut(CamelModel):
    id: int
    name: str
    code: str | None = None
    class_id: int
    description: str | None = None
    is_active: bool
    created_at: dt.datetime
    updated_at: dt.datetime
    school_class: ClassBrief | None = Field(default=None, validation_alias="school_class", serialization_alias="class")


class SubjectDetailOut(SubjectOut):
    exams: list[ExamRecord] = []


# --- Fees ---

class FeeCreateRequest(CamelModel):
    student_id: int | None = None
    fee_type: str | None = None
    amount: float | None = None
    due_date: OptionalDate = None
    remarks: str | None = None


class FeeUpdateRequest(CamelModel):
    status: str | None = None
    paid_amount: float | None = None
    paid_date: OptionalDate = None
    remarks: str | None = None
    receipt_no: str | None = None


class FeeOut(FeeRecord):
    student: StudentOut | None = None


# --- Attendance ---

class AttendanceEntry(CamelModel):
    student_id: int
    status: str
    remarks: str | None = None


class AttendanceMarkRequest(CamelModel):
    date: OptionalDate = None
    records: list[AttendanceEntry] = Field(min_length=1)


class AttendanceOut(AttendanceRecord):
    student: StudentBrief | None = None


# --- Exams ---

class ExamPayload(CamelModel):
    student_id: int | None = None
    subject_id: int | None = None
    exam_type: str | None = None
    exam_date: OptionalDate = None
    total_marks: float | None = None
    obtained_marks: float | None = None
    grade: str | None = None


class ExamOut(ExamRecord):
    student: StudentBrief | None = None


# --- Announcements & academic years ---

class AnnouncementCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    target_role: str = "all"
    notify: bool = False


class AnnouncementOut(CamelModel):
    id: int
    title: str
    content: str
    target_role: str
    is_active: bool
    created_at: dt.datetime


class AcademicYearCreateRequest(CamelModel):
    year: str = Field(min_length=4, max_length=20)
    start_date: FlexibleDate
    end_date: FlexibleDate
    is_active: bool = False


class AcademicYearOut(CamelModel):
    id: int
    year: str
    start_date: dt.date
    end_date: dt.date
    is_active: bool
