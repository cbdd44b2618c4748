"""
Configuration management for the Math Mentor backend.

Centralizes all configuration using Pydantic settings with environment variable support.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./math_mentor.db",
        description="SQLAlchemy connection URL (SQLite, PostgreSQL or MySQL)"
    )
    db_pool_size: int = Field(
        default=5,
        description="Database connection pool size"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Maximum overflow connections"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Connection pool timeout in seconds"
    )

    # API Configuration
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8000,
        description="API server port"
    )

    # LLM Configuration
    llm_provider: str = Field(
        default="openai",
        description="LLM provider: openai or anthropic"
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier passed to the provider"
    )
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key (required when llm_provider is openai)"
    )
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key (required when llm_provider is anthropic)"
    )
    llm_timeout: int = Field(
        default=60,
        description="Per-request timeout in seconds handed to the provider client"
    )
    llm_max_retries: int = Field(
        default=1,
        description="Attempts per model call; 1 disables retries"
    )
    chat_max_tokens: int = Field(
        default=2048,
        description="Token budget for conversational replies"
    )
    generation_max_tokens: int = Field(
        default=3000,
        description="Token budget for problem and quiz generation"
    )

    # Performance tracking
    performance_update_max_attempts: int = Field(
        default=5,
        description="Optimistic-lock attempts for a performance update before giving up"
    )

    # Application Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings: Application settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None


def validate_required_settings(settings: Optional[Settings] = None):
    """
    Validate that all required settings are present at runtime.

    Should be called after settings are loaded but before application starts.
    Raises ValueError if required settings are missing.
    """
    settings = settings or get_settings()

    if settings.llm_provider not in ("openai", "anthropic"):
        raise ValueError(
            f"Unsupported LLM_PROVIDER '{settings.llm_provider}'. Use 'openai' or 'anthropic'."
        )

    if settings.llm_provider == "openai" and not settings.openai_api_key:
        raise ValueError(
            "OPENAI_API_KEY environment variable is required but not set. "
            "Please ensure the secret is configured in your environment or .env file."
        )

    if settings.llm_provider == "anthropic" and not settings.anthropic_api_key:
        raise ValueError(
            "ANTHROPIC_API_KEY environment variable is required when LLM_PROVIDER=anthropic."
        )

    if not settings.database_url:
        raise ValueError("DATABASE_URL is required but not set")

    return True
