"""TradeBoost — Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Google Ads API ──
    google_ads_client_id: str = ""
    google_ads_client_secret: str = ""
    google_ads_developer_token: str = ""
    google_ads_login_customer_id: str = ""  # Manager (MCC) account, dashes allowed
    google_ads_api_version: str = "v17"
    google_ads_base_url: str = "https://googleads.googleapis.com"
    google_oauth_token_url: str = "https://oauth2.googleapis.com/token"
    google_ads_max_attempts: int = 1  # 1 = single shot, no retry
    google_ads_retry_base_delay: float = 2.0  # seconds

    # ── Database ──
    database_url: str = ""

    # ── Auth ──
    auth_jwt_secret: str = ""
    auth_jwt_algorithm: str = "HS256"
    call_webhook_secret: Optional[str] = None

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = False
    sync_interval_minutes: int = 45

    # ── Reporting ──
    reporting_timezone: str = "Europe/London"  # Fallback; overridden per profile
    default_currency: str = "GBP"
    spend_freshness_minutes: int = 45
    qualification_min_duration_seconds: int = 30
    sync_lease_seconds: int = 120

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/tradeboost.db"
        return "sqlite:///./tradeboost.db"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
