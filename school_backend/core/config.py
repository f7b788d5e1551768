import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Request

INSECURE_JWT_SECRETS = {"change-me", "your-default-secret-key"}


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and read-only afterwards."""

    jwt_secret_key: str
    app_env: str = "development"
    database_url: str = "sqlite:///./school.db"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 24 * 60
    cookie_name: str = "token"
    cookie_secure: bool = False
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    upload_dir: Path = Path("uploads")
    max_upload_bytes: int = 5 * 1024 * 1024
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    email_username: str = ""
    email_password: str = field(default="", repr=False)

    @property
    def mail_enabled(self) -> bool:
        return bool(self.email_username and self.email_password)


def validate_runtime_config(settings: Settings) -> None:
    secret = (settings.jwt_secret_key or "").strip()
    if not secret or secret in INSECURE_JWT_SECRETS:
        raise RuntimeError("JWT_SECRET_KEY must be set to a non-default value.")


def load_settings() -> Settings:
    load_dotenv()
    settings = Settings(
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", ""),
        app_env=os.getenv("APP_ENV", "development"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./school.db"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", str(24 * 60))),
        cookie_secure=_get_bool(os.getenv("AUTH_COOKIE_SECURE"), default=False),
        cors_origins=_get_list(os.getenv("CORS_ORIGINS"), ("http://localhost:3000",)),
        upload_dir=Path(os.getenv("UPLOAD_DIR", "uploads")),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))),
        smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
        smtp_port=int(os.getenv("SMTP_PORT", "587")),
        email_username=os.getenv("EMAIL_USERNAME", ""),
        email_password=os.getenv("EMAIL_PASSWORD", ""),
    )
    validate_runtime_config(settings)
    return settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
