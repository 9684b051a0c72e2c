import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: str) -> list:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    """Application settings read from the environment (.env supported)"""

    def __init__(self):
        # Database
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hometeam.db")

        # Auth
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))

        # Media storage
        self.MEDIA_STORAGE_BACKEND = os.getenv("MEDIA_STORAGE_BACKEND", "s3").lower()
        self.AWS_REGION = os.getenv("AWS_REGION")
        self.AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
        self.AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
        self.S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME")
        self.SUPABASE_URL = os.getenv("SUPABASE_URL")
        self.SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        self.SUPABASE_BUCKET = os.getenv("SUPABASE_BUCKET", "task-media")
        self.MEDIA_UPLOAD_URL_EXPIRES = int(os.getenv("MEDIA_UPLOAD_URL_EXPIRES", "3600"))
        self.COMPLETE_ON_UPLOAD_REQUEST = _get_bool("COMPLETE_ON_UPLOAD_REQUEST")

        # HTTP
        self.CORS_ORIGINS = _get_list(
            "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
        )

        # Logging / email
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.EMAIL_FROM = os.getenv("EMAIL_FROM", "no-reply@hometeam.local")

        if "JWT_SECRET" not in os.environ:
            logger.warning("JWT_SECRET is not set; using an insecure default secret")


_settings = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Drop cached settings so the next call re-reads the environment"""
    global _settings
    _settings = None
