import os

os.environ["MADRASHA_DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["EMAIL_PROVIDER"] = "mock"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import date
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.backend import app
from backend.madrasha_module.database import Base, build_engine, get_db_session
from backend.madrasha_module.email_service import EmailDispatchError, MockEmailService, get_mailer
from backend.madrasha_module.models import SchoolClass, Student, Subject, Teacher, User, UserRole
from backend.madrasha_module.security import hash_password, issue_session_token
from backend.madrasha_module.storage import LocalStorageService, get_storage


PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


class RecordingMailer(MockEmailService):
    """Mock mailer that keeps what it sent for assertions."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.outbox: list[dict[str, str]] = []

    def send_email(self, to, subject, html):
        sent = super().send_email(to, subject, html)
        self.outbox.append({"to": to, "subject": subject, "html": html})
        return sent


class BouncingMailer(RecordingMailer):
    def send_email(self, to, subject, html):
        raise EmailDispatchError(f"Failed to send email to {to}: mailbox full")


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def mailer():
    return RecordingMailer(from_email="noreply@test.local", from_name="Test Madrasha")


@pytest.fixture()
def storage(tmp_path):
    return LocalStorageService(str(tmp_path / "uploads"))


@pytest.fixture()
def client(session_factory, mailer, storage):
    def override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    def _make_user(role: UserRole, email: str | None = None, name: str | None = None, is_active: bool = True):
        user = User(
            email=email or f"{role.value}{db.query(User).count() + 1}@test.local",
            password_hash=PASSWORD_HASH,
            name=name or role.value.title(),
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_session_token(user)}"}


@pytest.fixture()
def admin(make_user):
    return make_user(UserRole.ADMIN, email="admin@test.local")


@pytest.fixture()
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture()
def school(db, make_user):
    """One class with a teacher, a subject, and two students; the first has a login and a parent."""
    teacher_user = make_user(UserRole.TEACHER, email="teacher@test.local")
    student_user = make_user(UserRole.STUDENT, email="student@test.local")
    parent_user = make_user(UserRole.PARENT, email="parent@test.local")

    teacher = Teacher(user=teacher_user, name="Abdul Karim", employee_id="T001", email="teacher@test.local")
    hifz = SchoolClass(name="Hifz 1", section="A", teacher=teacher, capacity=30)
    kitab = SchoolClass(name="Kitab 5", section="A", capacity=25)
    quran = Subject(name="Quran", code="QUR101", school_class=hifz)
    ahmad = Student(
        user=student_user,
        parent=parent_user,
        name="Ahmad",
        roll_number="H001",
        school_class=hifz,
        email="student@test.local",
        date_of_birth=date(2010, 5, 15),
    )
    ibrahim = Student(name="Ibrahim", roll_number="K001", school_class=kitab)
    db.add_all([teacher, hifz, kitab, quran, ahmad, ibrahim])
    db.commit()

    return SimpleNamespace(
        teacher=teacher,
        teacher_user=teacher_user,
        student_user=student_user,
        parent_user=parent_user,
        hifz=hifz,
        kitab=kitab,
        quran=quran,
        ahmad=ahmad,
        ibrahim=ibrahim,
    )
