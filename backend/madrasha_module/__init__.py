import logging

from .config import settings
from .database import Base, SessionLocal, engine
from .routes import router
from .services.seed import seed_demo_data


logger = logging.getLogger(__name__)


def init_madrasha_module() -> None:
    Base.metadata.create_all(bind=engine)
    if not settings.seed_demo_data:
        return
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()


__all__ = ["router", "init_madrasha_module"]
