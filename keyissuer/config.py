"""Keyissuer configuration management.

Configuration sources (in priority order):
1. Environment variables (KEYISSUER_ prefix)
2. Config file (config.yaml)
3. Defaults
"""

from __future__ import annotations

import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class DatabaseConfig(BaseModel):
    """Database configuration."""

    url: str = "sqlite+aiosqlite:///./keyissuer.db"
    echo: bool = False


class SecurityConfig(BaseModel):
    """Key issuance policy."""

    # Lifetime of an issued key
    key_ttl_seconds: int = Field(default=3600, gt=0)

    # bcrypt cost factor used for both password hashing and key derivation
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Serialize issue() per email within this process. Does not cover
    # multiple instances sharing one database.
    serialize_issuance: bool = True

    @property
    def key_ttl(self) -> timedelta:
        return timedelta(seconds=self.key_ttl_seconds)


class Settings(BaseSettings):
    """Keyissuer application settings."""

    model_config = SettingsConfigDict(
        env_prefix="KEYISSUER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)


def _load_config_file() -> dict:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. KEYISSUER_CONFIG_FILE environment variable
    2. ./config.yaml
    3. /etc/keyissuer/config.yaml
    """
    config_paths = [
        os.environ.get("KEYISSUER_CONFIG_FILE"),
        Path("config.yaml"),
        Path("/etc/keyissuer/config.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Configuration is loaded from:
    1. YAML config file (if exists)
    2. Environment variables (override)
    3. Defaults
    """
    file_config = _load_config_file()
    return Settings(**file_config)
