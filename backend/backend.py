import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

from dotenv import load_dotenv

# Settings are read at import time, so .env must be loaded first.
env_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env")
load_dotenv(dotenv_path=env_path)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from backend.madrasha_module import init_madrasha_module, router as madrasha_router  # noqa: E402
from backend.madrasha_module.config import settings  # noqa: E402
from backend.madrasha_module.database import engine  # noqa: E402
from backend.madrasha_module.responses import install_exception_handlers  # noqa: E402


# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        logger.info("Initializing madrasha module...")
        init_madrasha_module()
        logger.info("Madrasha module initialized.")
    except SQLAlchemyError as e:
        logger.error(f"Startup DB Error: {e}")
    yield
    logger.info("Shutting down...")


app = FastAPI(title="Darul Abraar Madrasha API", lifespan=lifespan)

origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)
app.include_router(madrasha_router)


@app.get("/api/health")
def health_check():
    """Verify the backend is running and can reach its database."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"error: {e}"

    return {
        "success": True,
        "data": {
            "status": "healthy",
            "database": db_status,
            "storageProvider": settings.storage_provider,
            "emailProvider": settings.email_provider,
            "timestamp": datetime.now().isoformat(),
        },
    }


if __name__ == "__main__":
    import uvicorn
    # Set BACKEND_RELOAD=true explicitly if hot reload is needed.
    reload_enabled = os.getenv("BACKEND_RELOAD", "false").lower() == "true"
    backend_host = os.getenv("BACKEND_HOST", "127.0.0.1")
    backend_port = int(os.getenv("BACKEND_PORT", "8000"))
    try:
        if reload_enabled:
            uvicorn.run("backend.backend:app", host=backend_host, port=backend_port, reload=True)
        else:
            uvicorn.run(app, host=backend_host, port=backend_port)
    except OSError as e:
        if "address already in use" in str(e).lower():
            logger.error(f"Port {backend_port} is already in use. Stop the old process or set BACKEND_PORT to another port.")
        raise
