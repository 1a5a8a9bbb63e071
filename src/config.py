"""Application configuration via environment variables.

Values can also be loaded from a .env file in the working directory.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./docflow.db"

    # Security
    SECRET_KEY: str = "dev-secret-key-CHANGE-IN-PRODUCTION"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10 MB
    ALLOWED_MIME_TYPES: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "image/jpeg",
        "image/png",
        "text/plain",
    ]

    # Orphaned blob sweep
    ORPHAN_SWEEP_ENABLED: bool = True
    ORPHAN_SWEEP_INTERVAL_HOURS: int = 24
    ORPHAN_SWEEP_GRACE_MINUTES: int = 60

    # Reports: TTF font for the PDF report, needed for non-Latin text. Unset uses Helvetica
    PDF_FONT_PATH: Optional[str] = None

    # Application
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance. Call get_settings.cache_clear() to reload."""
    return Settings()


settings = get_settings()
