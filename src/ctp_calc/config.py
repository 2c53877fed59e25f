"""
Configuration management for CTP Calc.

Handles loading configuration from environment variables, YAML files,
and provides sensible defaults for all settings.
"""

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    app_name: str = "CTP Calc"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # Line protocol server settings
    host: str = "0.0.0.0"
    port: int = Field(5000, ge=0, le=65535)
    backlog: int = 25
    max_request_bytes: int = Field(80, ge=3)  # Includes the \r\n terminator
    read_timeout: float = 10.0  # Seconds to wait for a complete request line

    # HTTP facade settings
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    @property
    def max_expression_length(self) -> int:
        return self.max_request_bytes - 2

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


# Global settings instance
settings = Settings()


def load_yaml_config(path: Path) -> dict:
    """Load configuration from a YAML file."""
    import yaml

    if not path.exists():
        return {}

    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_settings(config_path: Path | None = None, **overrides: Any) -> Settings:
    """
    Build settings from the environment, an optional YAML file, and overrides.

    Later sources win: environment < YAML file < keyword overrides. Overrides
    that are None are ignored so CLI options can be passed through directly.
    """
    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(load_yaml_config(config_path))
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
