from functools import lru_cache
import json
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic import PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors_origins(value: str) -> list[str]:
    if not value:
        return []

    parsed: list[str]
    raw = value.strip()
    if raw.startswith("["):
        try:
            items = json.loads(raw)
            parsed = [str(item).strip() for item in items if str(item).strip()]
        except (TypeError, ValueError):
            parsed = []
    else:
        parsed = [origin.strip() for origin in raw.split(",") if origin.strip()]

    # Preserve order and remove duplicates.
    return list(dict.fromkeys(parsed))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "SMM Panel"
    environment: str = "development"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Security
    secret_key: str
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7
    password_bcrypt_rounds: int = 12
    jwt_algorithm: str = "HS256"

    # Database
    database_url: PostgresDsn
    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_timeout: int = 15
    db_pool_recycle: int = 1200
    db_pool_pre_ping: bool = True

    # Rate limits (slowapi syntax)
    rate_limit_default: str = "100/15minute"
    auth_rate_limit: str = "5/15minute"
    order_rate_limit: str = "30/minute"
    rate_limit_enabled: bool = True

    # Ledger defaults used when the settings table has no override.
    min_deposit_default: Decimal = Decimal("5")
    max_deposit_default: Decimal = Decimal("10000")

    # Frontend
    frontend_base_url: str = "http://localhost:3000"
    static_dir: str = str(Path(__file__).resolve().parents[1] / "static")

    # Email (password reset)
    email_provider: str = "console"  # console|resend|smtp
    email_from: str = "SMM Panel <no-reply@smmpanel.local>"
    resend_api_key: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True

    # CORS
    cors_origins: str = "http://localhost:3000"
    auto_create_tables: bool = False

    # Ops: promote existing users to admin on startup (comma-separated emails).
    bootstrap_admin_emails: str = ""


@lru_cache
def get_settings() -> Settings:
    return Settings()
