"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # ── Runtime ───────────────────────────────────────────────────────────
    APP_ENV: str = "production"     # "development" exposes error detail in 500s

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 3000
    API_PREFIX: str = "/api"

    # ── Feature flags ─────────────────────────────────────────────────────
    AUTH_REQUIRED: bool = True          # Admin routes demand a bearer token
    EXTENDED_ANALYTICS: bool = True     # Daily pattern + hourly analytics route

    # ── History / analytics ───────────────────────────────────────────────
    HISTORY_CAP: int = 10000
    RECENT_CHANGES_LIMIT: int = 50
    PEAK_HOURS_LIMIT: int = 5
    LOCAL_UTC_OFFSET_HOURS: int = 7     # WIB, fixed offset (no DST)
    STATUS_LOG_INTERVAL_SECONDS: int = 300

    # ── Security ──────────────────────────────────────────────────────────
    JWT_SECRET: str = "change-me-parking-analytics-signing-key"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_HOURS: int = 24
    PASSWORD_MIN_LENGTH: int = 6
    BCRYPT_ROUNDS: int = 12
    ADMIN_ROLES: List[str] = ["admin", "superadmin"]
    DEFAULT_USER_ROLE: str = "admin"

    # ── Seed admin account (skipped when password is empty) ──────────────
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@parking.local"
    ADMIN_PASSWORD: str = ""

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
