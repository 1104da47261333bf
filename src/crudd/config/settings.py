"""Configuration management for crudd.

Loads settings from a YAML configuration file with environment variable
overrides (``CRUDD_SERVER__PORT=8000`` and friends). Supports .env files.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/crudd.yaml")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4901, ge=1, le=65535)


class RunnerConfig(BaseModel):
    grace_period: float = Field(
        default=5.0, gt=0, description="Seconds to wait for a command to exit once its output is done"
    )
    request_timeout: float | None = Field(
        default=None, gt=0, description="Kill a command that is still running after this many seconds"
    )
    max_line_bytes: int = Field(default=64 * 1024, gt=0)
    fs_root: str | None = Field(
        default=None, description="Prefix applied to every executable path (fake filesystem for tests)"
    )


class CommandConfig(BaseModel):
    name: str
    path: str
    args: str = ""


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)
    verbose: bool = Field(default=False, description="Log every line streamed to a client")


class Settings(BaseSettings):
    """Root configuration for the crudd server.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "CRUDD_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Replaces the built-in catalog when set
    commands: list[CommandConfig] | None = Field(default=None)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: init values from YAML > env vars > .env file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
