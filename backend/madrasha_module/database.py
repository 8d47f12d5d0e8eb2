import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings


DB_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "madrasha.db")
DATABASE_URL = settings.database_url or f"sqlite:///{DB_PATH}"

# Vendor codes for unique-key violations: Postgres SQLSTATE and the sqlite3 extended error name.
UNIQUE_VIOLATION_CODES = {"23505", "SQLITE_CONSTRAINT_UNIQUE"}
FOREIGN_KEY_VIOLATION_CODES = {"23503", "SQLITE_CONSTRAINT_FOREIGNKEY"}

Base = declarative_base()


def build_engine(url: str, **kwargs) -> Engine:
    engine = create_engine(url, future=True, **kwargs)
    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

    return engine


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _error_code(exc: IntegrityError) -> str | None:
    orig = exc.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlite_errorname", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    if _error_code(exc) in UNIQUE_VIOLATION_CODES:
        return True
    message = str(exc.orig)
    return "UNIQUE constraint failed" in message or "duplicate key value" in message


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    if _error_code(exc) in FOREIGN_KEY_VIOLATION_CODES:
        return True
    message = str(exc.orig)
    return "FOREIGN KEY constraint failed" in message or "violates foreign key constraint" in message


def violated_column(exc: IntegrityError) -> str | None:
    """Best-effort name of the column behind a unique violation.

    SQLite reports ``UNIQUE constraint failed: students.roll_number``;
    Postgres reports ``Key (roll_number)=(H001) already exists``.
    """
    message = str(exc.orig)
    if "UNIQUE constraint failed:" in message:
        target = message.split("UNIQUE constraint failed:", 1)[1].strip().split(",")[0]
        return target.rsplit(".", 1)[-1].strip()
    if "Key (" in message:
        return message.split("Key (", 1)[1].split(")", 1)[0].split(",")[0].strip()
    return None
