"""Configuration for the tracker's connection to the hosted data service."""

from functools import lru_cache
from typing import Any, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .infrastructure.errors import ErrorKind, GatewayError


SETUP_STEPS = (
    "1. Copy .env.example to .env\n"
    "2. Fill in the project URL and anon key from the data service dashboard\n"
    "3. Restart the application"
)


class ConfigurationError(GatewayError):
    """Required connection settings are missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            ErrorKind.CONFIGURATION,
            "Missing required environment variables: "
            f"{', '.join(missing)}\n{SETUP_STEPS}",
        )


class TrackerSettings(BaseSettings):
    """Settings for the tracker.

    The connection values accept the plain SUPABASE_* names, TRACKER_*
    names and the VITE_SUPABASE_* names used by existing front-end
    deployments, so one .env can serve both.
    """

    # Data service connection
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "supabase_url", "SUPABASE_URL", "TRACKER_SUPABASE_URL", "VITE_SUPABASE_URL",
        ),
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "supabase_anon_key",
            "SUPABASE_ANON_KEY",
            "TRACKER_SUPABASE_ANON_KEY",
            "VITE_SUPABASE_ANON_KEY",
        ),
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        validation_alias=AliasChoices("request_timeout", "TRACKER_REQUEST_TIMEOUT"),
    )

    # Store behaviour
    default_campaign_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("default_campaign_id", "TRACKER_DEFAULT_CAMPAIGN_ID"),
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("log_level", "TRACKER_LOG_LEVEL"),
    )
    log_json: bool = Field(
        default=False,
        validation_alias=AliasChoices("log_json", "TRACKER_LOG_JSON"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )

    def missing_connection_settings(self) -> list[str]:
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")
        return missing


def load_settings(env_file: Optional[str] = ".env", **overrides: Any) -> TrackerSettings:
    """
    Load settings and fail fast when the connection is not configured.

    Raises:
        ConfigurationError: If the URL or anon key is missing
    """
    settings = TrackerSettings(_env_file=env_file, **overrides)
    missing = settings.missing_connection_settings()
    if missing:
        raise ConfigurationError(missing)
    return settings


@lru_cache
def get_settings() -> TrackerSettings:
    """Get cached tracker settings instance."""
    return load_settings()
