"""AdsDesk — Central Configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Graph API ──
    meta_base_url: str = "https://graph.facebook.com"
    meta_api_version: str = "v18.0"
    facebook_app_id: Optional[str] = None
    facebook_app_secret: Optional[str] = None
    http_timeout: float = 30.0
    max_pages: int = 50

    # ── Time windows ──
    reference_utc_offset_hours: int = 7  # Legacy UTC+7 reporting clock
    default_date_preset: str = "today"
    all_time_since: str = "2010-01-01"

    # ── Storage ──
    accounts_file: str = "data/accounts.json"

    # ── Telegram ──
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout: float = 10.0

    # ── App ──
    log_level: str = "INFO"

    @property
    def graph_base(self) -> str:
        """Versioned Graph API root, e.g. https://graph.facebook.com/v18.0."""
        return f"{self.meta_base_url.rstrip('/')}/{self.meta_api_version}"

    @property
    def has_app_credentials(self) -> bool:
        return bool(self.facebook_app_id and self.facebook_app_secret)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
