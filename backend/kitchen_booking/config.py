# backend/kitchen_booking/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./kitchen_booking.db"
    redis_url: str = "redis://localhost:6379/0"

    # Locations without a valid IANA zone fall back to this one
    default_timezone: str = "America/St_Johns"
    service_fee_rate: float = 0.05
    fallback_daily_booking_limit: int = 2

    slots_cache_enabled: bool = True
    notifications_enabled: bool = True
    create_tables: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # relative sqlite path is resolved against the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
