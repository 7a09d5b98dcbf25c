"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./appvault.db"

    # Identity
    admin_email: str = "admin@appvault.com"
    login_starting_points: int = 100
    signup_starting_points: int = 50
    default_theme: str = "dark"

    # Rewards
    usage_reward_points: int = 1
    bug_reward_points: int = 50

    # Premium pricing
    premium_price: int = 199           # currency units per month
    points_per_currency_unit: int = 10  # 10 points = 1 unit of discount
    currency: str = "INR"

    # OpenAI (recommendations)
    openai_api_key: str = ""
    recommendation_model: str = "gpt-4o-mini"
    recommendation_limit: int = 3
    recommendation_timeout_seconds: float = 20.0

    # Payment gateway
    payment_api_url: str = ""
    payment_api_key: str = ""
    payment_timeout_seconds: float = 30.0

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    project_name: str = "AppVault"
    version: str = "2.1.0"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
