"""
Configuration helpers for the farmer registration backend.

Exposes a frozen Settings object built from environment variables so that
routers/services never read os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    jwt_secret: str
    jwt_algorithm: str
    jwt_ttl_seconds: int
    otp_ttl_seconds: int
    sms_backend: str
    onfon_api_url: str
    onfon_api_key: str
    onfon_client_id: str
    onfon_sender_id: str
    sms_timeout_seconds: float
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    default_backend = "onfon" if app_env == "prod" else "console"
    return Settings(
        app_env=app_env,
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./farmers.db"),
        jwt_secret=os.getenv("JWT_SECRET", "change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_ttl_seconds=_int(os.getenv("JWT_TTL_SECONDS", "604800"), 604800),
        otp_ttl_seconds=_int(os.getenv("OTP_TTL_SECONDS", "600"), 600),
        sms_backend=(os.getenv("SMS_BACKEND") or default_backend).lower(),
        onfon_api_url=os.getenv("ONFON_API_URL", "https://api.onfonmedia.co.ke/v1/sms/SendBulkSMS"),
        onfon_api_key=os.getenv("ONFON_API_KEY", ""),
        onfon_client_id=os.getenv("ONFON_CLIENT_ID", ""),
        onfon_sender_id=os.getenv("ONFON_SENDER_ID", ""),
        sms_timeout_seconds=_float(os.getenv("SMS_TIMEOUT_SECONDS", "10"), 10.0),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
