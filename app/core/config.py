from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "CheckIn Tracker"
    API_V1_STR: str = "/api/v1"
    DATABASE_URL: str
    FRONTEND_URL: str = "http://localhost:5173"

    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Server configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:8080,http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    # Domain settings
    INVITATION_EXPIRY_DAYS: int = 7
    CHECK_INS_PER_PAGE: int = 15

    # SMTP settings for invitation emails (email is skipped when SMTP_HOST is empty)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    SMTP_FROM_EMAIL: Optional[str] = None
    SMTP_FROM_NAME: str = "CheckIn Tracker"

    # Periodic persistence of the OVERDUE status
    ENABLE_OVERDUE_SCHEDULER: bool = False
    OVERDUE_CHECK_INTERVAL_MINUTES: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'

settings = Settings()
