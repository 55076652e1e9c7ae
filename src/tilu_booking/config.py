"""Pineus Tilu Booking — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./tilu_booking.db"

    # ── OTP / sessions ────────────────────────────────────
    otp_ttl_seconds: int = 300  # 5 minutes
    session_cookie_name: str = "sessionId"
    session_cookie_secure: bool = False
    # None keeps sessions alive until logout or restart
    session_ttl_seconds: int | None = None
    password_hasher: str = "bcrypt"

    # ── SMTP ──────────────────────────────────────────────
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True
    email_from: str = "Pineus Tilu <noreply@pineustilu.local>"

    # ── App ───────────────────────────────────────────────
    app_name: str = "Pineus Tilu Booking"
    debug: bool = False
    metrics_enabled: bool = True

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
