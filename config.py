"""
Runtime configuration for the canteen backend.

Everything is read from the environment exactly once, in load_settings(),
and handed to the routes through the get_settings dependency.
"""
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

BASE_DIR = Path(__file__).resolve().parent


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    database_url: Optional[str] = Field(None, description="MongoDB connection string")
    database_name: str = Field("canteen", description="MongoDB database name")
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    telegram_api_url: str = "https://api.telegram.org"
    notify_timeout: float = Field(10.0, gt=0, description="Seconds per outbound bot call")
    admin_user: str = "admin"
    admin_password: str = Field("12345", description="Seed password for the admin record")
    allow_fallback_login: bool = Field(False, description="Accept admin_password for any user")
    static_dir: str = str(BASE_DIR / "public")
    log_level: str = "INFO"
    port: int = 3000


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        database_name=os.getenv("DATABASE_NAME", "canteen"),
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID") or None,
        telegram_api_url=os.getenv("TELEGRAM_API_URL", "https://api.telegram.org"),
        notify_timeout=float(os.getenv("NOTIFY_TIMEOUT", "10")),
        admin_user=os.getenv("ADMIN_USER", "admin"),
        admin_password=os.getenv("ADMIN_PASS", "12345"),
        allow_fallback_login=_flag(os.getenv("ADMIN_FALLBACK_LOGIN")),
        static_dir=os.getenv("STATIC_DIR", str(BASE_DIR / "public")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", "3000")),
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
