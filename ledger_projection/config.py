"""Configuration management using Pydantic Settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "ledger-projection"
    log_level: str = "INFO"

    # Projection
    projection_horizon_months: int = Field(default=24, ge=1)
    paid_tolerance_cents: int = Field(default=1, ge=0)  # Remainders at or below this count as paid

    # Display (boundary only)
    currency_symbol: str = "R$"
    decimal_separator: str = ","
    thousands_separator: str = "."


settings = Settings()
