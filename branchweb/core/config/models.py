"""Pydantic configuration models for the Branch client.

This module defines the configuration tree used by the client and the CLI.
For loading and merging logic, see loader.py.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ApiConfig(BaseModel):
    """Remote endpoints and HTTP settings."""

    api_endpoint: str = Field(default="https://api.branch.io", description="Base URL of the REST API")
    link_service_endpoint: str = Field(
        default="https://bnc.lt", description="Base URL of the link service (fingerprint, clicks, SMS)"
    )
    link_domain: str = Field(
        default="https://bnc.lt/", description="Prefix stripped from links before registering a click"
    )
    timeout: float = Field(default=10.0, description="HTTP timeout in seconds")
    sdk_source: str = Field(default="web-sdk", description="Value sent as 'source' on created links")

    @field_validator("api_endpoint", "link_service_endpoint")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Endpoints are joined with absolute paths, so drop any trailing slash."""
        return value.rstrip("/")


class StorageConfig(BaseModel):
    """Where the session record lives between client instances."""

    backend: Literal["memory", "file"] = Field(default="memory", description="Storage backend: memory or file")
    path: Path = Field(default=Path(".branch/session.json"), description="JSON file used by the file backend")
    record_name: str = Field(default="branch_session", description="Name of the persisted session record")


class LoggingConfig(BaseModel):
    """Configuration for logging system."""

    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    directory: str = Field(default="logs", description="Directory for log files")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB before rotation")
    backup_count: int = Field(default=5, description="Number of backup log files to keep")
    to_file: bool = Field(default=False, description="Also write logs to a rotating file")


class Config(BaseModel):
    """Root configuration for the Branch client."""

    app_id: str | None = Field(default=None, description="Branch app ID from the dashboard")
    api: ApiConfig = Field(default_factory=ApiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    model_config = {"extra": "allow"}

    @field_validator("app_id", mode="before")
    @classmethod
    def coerce_app_id(cls, value: object) -> object:
        """App IDs are numeric in the dashboard; YAML parses them as ints."""
        if isinstance(value, int):
            return str(value)
        return value
