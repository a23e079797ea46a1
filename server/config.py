# server/config.py

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel


load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Application settings.
    Built once at startup and handed to the app factory; nothing reads env afterwards.
    """

    database_url: str = "sqlite:///./data/app.db"

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Proof / avatar storage
    artifact_backend: str = "local"  # "local" or "memory"
    uploads_dir: Path = Path("data/uploads")
    upload_attempts: int = 3
    upload_backoff_seconds: float = 0.2

    # Outbound mail
    mail_backend: str = "log"  # "smtp" or "log"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    mail_from: str = ""

    cors_origins: list[str] = ["*"]
    enforce_ownership: bool = True

    configure_logging: bool = True
    log_dir: Path = Path("data/logs")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("JWT_SECRET_KEY")
        if not secret:
            raise RuntimeError("JWT_SECRET_KEY is not set")

        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./data/app.db"),
            jwt_secret_key=secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            artifact_backend=os.getenv("ARTIFACT_BACKEND", "local"),
            uploads_dir=Path(os.getenv("UPLOADS_DIR", "data/uploads")),
            upload_attempts=int(os.getenv("UPLOAD_ATTEMPTS", "3")),
            upload_backoff_seconds=float(os.getenv("UPLOAD_BACKOFF_SECONDS", "0.2")),
            mail_backend=os.getenv("MAIL_BACKEND", "log"),
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_user=os.getenv("EMAIL_USER", ""),
            smtp_password=os.getenv("EMAIL_PASS", ""),
            mail_from=os.getenv("MAIL_FROM", ""),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            enforce_ownership=_flag("ENFORCE_OWNERSHIP", "1"),
            configure_logging=_flag("CONFIGURE_LOGGING", "1"),
            log_dir=Path(os.getenv("LOG_DIR", "data/logs")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def sender(self) -> str:
        return self.mail_from or self.smtp_user
