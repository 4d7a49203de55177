"""Configuration management using Pydantic Settings"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="SPREAD_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Service
    service_name: str = "spread-engine"
    log_level: str = "INFO"

    # Money
    fee_rate: Decimal = Decimal("0")  # Platform fee as a fraction of the spread total
    max_contribution: Decimal | None = None  # The mobile app caps a spread at 300.00

    # Policies
    random_max_recipients: int = 6


settings = Settings()
