"""Application configuration management using Pydantic Settings."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    # Server identity advertised during MCP initialization
    server_name: str = "sendRequest"
    server_version: str = "1.0.0"

    # Outbound HTTP (send-get-request tool)
    request_timeout_seconds: float = Field(10.0, gt=0)

    # Logging (always written to stderr, stdout carries the protocol)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def log_level_number(self) -> int:
        """Numeric logging level for ``logging.basicConfig``."""
        return getattr(logging, self.log_level)
