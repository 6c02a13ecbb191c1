"""Application configuration helpers."""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Centralized configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    app_name: str = "Storefront Payments"
    environment: str = "dev"

    # Embedded database file unless DATABASE_URL points elsewhere
    database_url: Optional[str] = None
    sqlite_busy_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_json: Optional[bool] = None

    # Checkout / settlement behavior
    auth_token_ttl_days: int = 7
    recent_orders_limit: int = 5
    default_page_size: int = 200
    max_page_size: int = 1000
    seed_demo_data: bool = False

    # Verification mail
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    mail_sender: Optional[str] = None
    app_base_url: str = "https://storefrontsolutions.shop"

    # API behavior
    allow_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:8080", "*"]

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{(BASE_DIR / 'storefront.db').as_posix()}"

    def use_json_logs(self) -> bool:
        if self.log_json is not None:
            return self.log_json
        return self.environment != "dev"


@lru_cache
def get_settings() -> Settings:
    return Settings()
