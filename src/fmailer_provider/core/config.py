"""Configuration management for the FMailer provider.

Uses Pydantic Settings for type-safe, environment-based configuration.
"""

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv(override=False)

DEFAULT_ENDPOINT = "https://api.fmailer.com"


class Settings(BaseSettings):
    """Process-wide settings with environment variable support."""

    environment: str = Field("development", alias="FMAILER_ENVIRONMENT")

    # Logging configuration
    log_level: str = Field("INFO", alias="FMAILER_LOG_LEVEL")
    log_format: str = Field("text", alias="FMAILER_LOG_FORMAT")  # text or json

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["text", "json"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment setting."""
        valid_environments = ["development", "test", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class ProviderConfig(BaseSettings):
    """Provider block configuration: API credentials and endpoint.

    Explicit keyword values win over the ``FMAILER_TOKEN`` and
    ``FMAILER_ENDPOINT`` environment defaults.
    """

    token: str | None = Field(None, alias="FMAILER_TOKEN")
    endpoint: str = Field(DEFAULT_ENDPOINT, alias="FMAILER_ENDPOINT")

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str | None) -> str | None:
        """Treat a blank token as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        v = (v or "").strip() or DEFAULT_ENDPOINT
        if not v.startswith(("http://", "https://")):
            raise ValueError("Endpoint must be an http:// or https:// URL")
        return v.rstrip("/")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """Build a fresh settings instance from the environment."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance - will be created when first accessed
settings = None


def get_settings_instance() -> Settings:
    """Get the global settings instance, creating it if necessary."""
    global settings  # noqa: PLW0603
    if settings is None:
        settings = get_settings()
    return settings
