"""
Settings Management with Pydantic

Provides type-safe configuration for:
- Application name and log level
- The AI analysis provider (model, temperature, timeout, API key)

Values come from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AIConfig(BaseSettings):
    """AI analysis provider configuration."""
    model_config = SettingsConfigDict(
        env_prefix="AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    enabled: bool = True
    model_name: str = "gpt-4o-mini"
    temperature: float = 0.2
    timeout: float = 60.0

    # API key (loaded from environment)
    api_key: Optional[SecretStr] = Field(default=None, alias="OPENAI_API_KEY")
    base_url: Optional[str] = None


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_prefix="PRICING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Pricing Architect"
    log_level: str = "INFO"

    ai: AIConfig = Field(default_factory=AIConfig)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
