"""
Main Settings Configuration

This module provides the base configuration shared by every settings class
of the datalayer package.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="development", description="development, testing, staging or production")
    debug: bool = Field(default=False)

    # Project
    project_name: str = Field(default="datalayer")
    project_version: str = Field(default="0.1.0")
    project_root: Path = Field(default=Path(__file__).parent.parent)

    # Logging
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")


@lru_cache()
def get_settings() -> BaseConfig:
    """Get cached settings instance."""
    return BaseConfig()
