"""
Application Settings - Main Layer

Pydantic Settings for configuration management, read from environment
variables, an optional ``.env`` file and defaults.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from iothub_manager.shared import EnumEnvironment, EnumLogLevel
from iothub_manager.shared.env import load_secret_file_variables  # noqa: F401


class GESettings(BaseSettings):
    """Service metadata and server settings."""

    title: str = Field(default="IoT Hub Manager", description="Service title")
    description: str = Field(
        default="HTTP API to manage devices, tags and device twins "
        "stored in Azure IoT Hub",
        description="Service description",
    )
    version: str = Field(default="1.0.0", description="Service version")
    git_commit: str = Field(
        default="unknown",
        description="Git commit hash",
        validation_alias=AliasChoices("GE_GIT_COMMIT", "GIT_COMMIT"),
    )
    build_time: str = Field(
        default="unknown",
        description="Build timestamp",
        validation_alias=AliasChoices("GE_BUILD_TIME", "BUILD_TIME"),
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Interface to bind the server")
    port: int = Field(default=9002, description="Port to bind the server")
    reload: bool = Field(
        default=False, description="Enable auto-reload for development"
    )

    model_config = SettingsConfigDict(
        env_prefix="GE_", case_sensitive=False, extra="ignore"
    )


class IoTHubSettings(BaseSettings):
    """Azure IoT Hub connection settings."""

    connection_string: str = Field(
        default="",
        description="IoT Hub service connection string "
        "(HostName=...;SharedAccessKeyName=...;SharedAccessKey=...)",
        validation_alias=AliasChoices(
            "IOTHUB_CONNECTION_STRING", "PCS_IOTHUB_CONNSTRING"
        ),
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Registry request timeout in seconds"
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum devices returned per registry query page",
    )

    model_config = SettingsConfigDict(
        env_prefix="IOTHUB_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


class CorsSettings(BaseSettings):
    """CORS whitelist. CORS is disabled while ``origins`` is empty."""

    origins: List[str] = Field(default_factory=list, description="Allowed origins")
    methods: List[str] = Field(
        default_factory=lambda: ["*"], description="Allowed HTTP methods"
    )
    headers: List[str] = Field(
        default_factory=lambda: ["*"], description="Allowed request headers"
    )
    allow_credentials: bool = Field(
        default=False, description="Allow cookies and authorization headers"
    )

    model_config = SettingsConfigDict(
        env_prefix="CORS_", case_sensitive=False, extra="ignore"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: EnumLogLevel = Field(default=EnumLogLevel.INFO, description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format",
    )
    file_path: Optional[str] = Field(
        default=None, description="Log file path (if None, logs to console)"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_", case_sensitive=False, extra="ignore"
    )


class AppSettings(BaseSettings):
    """Main application settings, aggregating all sub-settings."""

    environment: EnumEnvironment = Field(
        default=EnumEnvironment.DEVELOPMENT, description="Application environment"
    )

    ge: GESettings = Field(default_factory=GESettings)
    iothub: IoTHubSettings = Field(default_factory=IoTHubSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


def get_settings() -> AppSettings:
    """
    Get application settings instance Factory.

    Patched in tests to provide environment specific settings.
    """
    return AppSettings()
