from pydantic_settings import BaseSettings
from typing import Optional
from importlib import metadata
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# ENVIRONMENT=production selects .env.production; anything else reads .env.
# Variables already in the process environment always win.
_backend_dir = Path(__file__).resolve().parent.parent
_is_production = os.environ.get("ENVIRONMENT") == "production"
load_dotenv(_backend_dir / (".env.production" if _is_production else ".env"))


def _app_version() -> str:
    """BUILD_VERSION file written by the deploy, else the installed distribution's version."""
    version_file = _backend_dir / "BUILD_VERSION"
    if version_file.exists():
        stamped = version_file.read_text().strip()
        if stamped:
            return stamped
    try:
        return metadata.version("bug-tracker")
    except metadata.PackageNotFoundError:
        return "0.1.0"


class Settings(BaseSettings):
    APP_NAME: str = "bug-tracker"
    SETTING_VERSION: str = _app_version()

    # Database settings
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "3306")
    DB_USER: str = os.getenv("DB_USER", "bugtracker")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
    DB_NAME: str = os.getenv("DB_NAME", "bugtracker")
    DB_URL: Optional[str] = os.getenv("DB_URL")  # Full URL override, e.g. sqlite+aiosqlite:///./bugs.db

    # Authentication settings
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    AUTH_COOKIE_NAME: str = "token"
    COOKIE_EXPIRE_DAYS: int = int(os.getenv("COOKIE_EXPIRE_DAYS", "7"))
    MIN_PASSWORD_LENGTH: int = 6

    # Environment
    IS_PRODUCTION: bool = _is_production

    # Listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # CORS settings
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*", "Authorization"]
    CORS_EXPOSE_HEADERS: list[str] = ["Authorization", "X-Request-ID"]

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "true").lower() == "true"
    LOG_DIR: str = "logs"
    LOG_FILENAME_PREFIX: str = "bug-tracker"
    LOG_BACKUP_COUNT: int = 10
    LOG_FORMAT: str = "standard"  # Options: "standard" or "json"
    LOG_REQUEST_BODY: bool = False
    LOG_SENSITIVE_FIELDS: list[str] = ["password", "token", "secret", "key", "authorization", "cookie"]
    LOG_PERFORMANCE_THRESHOLD_MS: int = 500

    @property
    def MAX_PAGE(self) -> int:
        # Keeps (page - 1) * limit within a signed 64-bit OFFSET
        return sys.maxsize // self.MAX_PAGE_SIZE

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = 'utf-8'
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if self.IS_PRODUCTION and self.JWT_SECRET_KEY == "change-me-in-production":
            raise ValueError("JWT_SECRET_KEY must be set in production")


settings = Settings()
