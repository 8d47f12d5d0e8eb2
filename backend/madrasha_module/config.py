import os
from dataclasses import dataclass


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("MADRASHA_DATABASE_URL", os.getenv("DATABASE_URL", ""))
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me-in-production")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_exp_minutes: int = int(os.getenv("JWT_EXP_MINUTES", "720"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    upload_dir: str = os.getenv("UPLOAD_DIR", "./uploads")
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
    storage_provider: str = os.getenv("STORAGE_PROVIDER", "local")
    aws_bucket_name: str = os.getenv("AWS_BUCKET_NAME", "")
    aws_region: str = os.getenv("AWS_REGION", "")
    email_provider: str = os.getenv("EMAIL_PROVIDER", "mock")
    email_from: str = os.getenv("EMAIL_FROM", "noreply@darulabraar.edu.bd")
    email_from_name: str = os.getenv("EMAIL_FROM_NAME", "দারুল আবরার মডেল কামিল মাদ্রাসা")
    smtp_host: str = os.getenv("SMTP_SERVER", "smtp.gmail.com")
    smtp_port: int = int(os.getenv("SMTP_PORT", "587"))
    smtp_username: str = os.getenv("SMTP_EMAIL", "")
    smtp_password: str = os.getenv("SMTP_PASSWORD", "").replace(" ", "")
    seed_demo_data: bool = _flag("SEED_DEMO_DATA", "true")
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")


settings = Settings()
