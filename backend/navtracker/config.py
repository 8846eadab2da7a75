"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

AMFI_NAV_HISTORY_URL = "https://portal.amfiindia.com/DownloadNAVHistoryReport_Po.aspx"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NAV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql://localhost/nav_tracker"

    # Market data provider
    provider_base_url: str = AMFI_NAV_HISTORY_URL
    provider_timeout: float = 30.0

    # Lookback budgets (calendar days)
    max_lookback_days: int = 5
    retry_lookback_days: int = 9
    repair_lookback_days: int = 5

    # Instruments, holidays and signal parameters
    tracker_config_path: Path = Path(__file__).parent.parent.parent / "tracker.yaml"

    # Email notifications (disabled unless host, sender and recipient are set)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    mail_from: str = ""
    mail_to: str = ""

    debug: bool = False

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.mail_from and self.mail_to)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
