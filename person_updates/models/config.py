"""Configuration models for the person updates task."""

from pydantic import BaseModel, Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class TmdbConfig(BaseModel):
    """Configuration for the TMDb API connection."""

    base_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", description="TMDb API base URL"
    )
    api_key: str = Field(default="", description="TMDb API key")
    accept_header: str = Field(
        default="application/json", description="Accept header sent with every request"
    )
    request_timeout_seconds: float = Field(
        default=30.0, gt=0, le=300, description="Per-request timeout in seconds"
    )


class ProvidersConfig(BaseModel):
    """Feature flags gating whether the task does anything."""

    enable_internet_providers: bool = Field(
        default=True, description="Master switch for all internet metadata providers"
    )
    enable_tmdb_updates: bool = Field(
        default=True, description="Enable incremental TMDb person updates"
    )


class StorageConfig(BaseModel):
    """Configuration for the local people cache."""

    people_data_path: str = Field(default=..., description="Root directory of cached people")
    cursor_file_name: str = Field(
        default="time.txt", description="Name of the cursor file inside people_data_path"
    )


class SyncConfig(BaseModel):
    """Configuration for sync scheduling and the feed retention window."""

    min_interval_hours: float = Field(
        default=24.0, gt=0, description="Minimum time between two sync attempts"
    )
    max_lookback_days: int = Field(
        default=13,
        ge=1,
        le=14,
        description="Furthest back the change feed is queried (feed keeps ~14 days)",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="If True, output JSON logs. If False, use console format.",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional path to log file. If None, logs only to stdout.",
    )


class AppConfig(BaseSettings):
    """Main application configuration.

    This class uses pydantic-settings to load configuration from environment
    variables with the APP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig
    tmdb: TmdbConfig = Field(default_factory=TmdbConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
