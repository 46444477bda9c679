from pydantic_settings import BaseSettings
import os
import subprocess
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Determine environment before loading any dotenv files.
# In production set ENVIRONMENT=production; locally it defaults to dev.
_backend_dir = Path(__file__).resolve().parent.parent
_is_production = os.environ.get("ENVIRONMENT") == "production"

if _is_production:
    load_dotenv(_backend_dir / ".env.production", override=True)
else:
    load_dotenv(_backend_dir / ".env", override=False)


def _get_git_version() -> str:
    """Get version from BUILD_VERSION file, git tag, or fallback."""
    version_file = _backend_dir / "BUILD_VERSION"
    if version_file.exists():
        v = version_file.read_text().strip()
        if v:
            return v
    try:
        tag = subprocess.check_output(
            ["git", "describe", "--tags", "--abbrev=0"],
            stderr=subprocess.DEVNULL,
            cwd=str(_backend_dir),
            timeout=5,
        ).decode().strip()
        if tag:
            return tag
    except (OSError, subprocess.SubprocessError):
        pass
    return "0.1.0"


class Settings(BaseSettings):
    APP_NAME: str = "Journal Platform"
    JOURNAL_NAME: str = "Journal of Plastic & Reconstructive Surgery"
    SETTING_VERSION: str = _get_git_version()
    FRONTEND_URL: str = "http://localhost:5173"  # Dev default

    # Database settings
    DB_HOST: str = "localhost"
    DB_PORT: str = "3306"
    DB_USER: str = "journal"
    DB_PASSWORD: str = ""
    DB_NAME: str = "journal"
    DATABASE_URL_OVERRIDE: Optional[str] = os.getenv("DATABASE_URL")

    # Authentication settings
    JWT_SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Environment
    IS_PRODUCTION: bool = _is_production

    # Email/SMTP settings
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    FROM_EMAIL: str = ""
    ADMIN_NOTIFICATION_EMAIL: str = ""  # Receives new-submission alerts when set
    AUTH_EMAIL_HOOK_SECRET: str = ""  # When set, /api/functions/auth-email requires X-Hook-Secret

    # Object storage (S3-compatible)
    STORAGE_REGION: str = "us-east-1"
    STORAGE_ENDPOINT_URL: Optional[str] = None  # Set for non-AWS S3-compatible stores
    STORAGE_PUBLIC_BASE_URL: Optional[str] = None  # CDN/public host for the image bucket
    ARTICLE_IMAGES_BUCKET: str = "article-images"
    MANUSCRIPTS_BUCKET: str = "manuscripts"
    SIGNED_URL_EXPIRES_SECONDS: int = 3600
    MAX_IMAGE_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # CORS settings
    CORS_ORIGINS: list[str] = ["*"]  # In production, specify exact origins
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*", "Authorization"]
    CORS_EXPOSE_HEADERS: list[str] = ["Authorization", "X-Request-ID"]

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME_PREFIX: str = "journal"
    LOG_BACKUP_COUNT: int = 10
    LOG_FORMAT: str = "standard"  # Options: "standard" or "json"
    LOG_REQUEST_BODY: bool = False  # Whether to log request bodies
    LOG_RESPONSE_BODY: bool = False  # Whether to log response bodies
    LOG_SENSITIVE_FIELDS: list[str] = ["password", "token", "secret", "key", "authorization"]
    LOG_PERFORMANCE_THRESHOLD_MS: int = 500  # Log slow operations above this threshold

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = 'utf-8'
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if self.IS_PRODUCTION and self.JWT_SECRET_KEY == "dev-secret-change-me":
            raise ValueError("JWT_SECRET_KEY not found in environment variables")
        if not self.FRONTEND_URL:
            raise ValueError("FRONTEND_URL not found in environment variables")


settings = Settings()
