"""Configuration management for the Marvin MCP server.

Supports a YAML configuration file and environment variable overrides
(including a local ``.env`` file). Configuration is loaded once and cached.

The token fields are only defaults: each inbound request resolves its own
credentials and consults these values as part of that resolution.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MARVIN_API_URL = "https://serv.amazingmarvin.com/api"


class MarvinSettings(BaseSettings):
    """Remote Marvin API configuration."""
    api_url: str = Field(default=DEFAULT_MARVIN_API_URL, description="Marvin API base URL")
    api_token: Optional[str] = Field(default=None, description="Default API token", repr=False)
    full_access_token: Optional[str] = Field(
        default=None, description="Default full-access token", repr=False
    )
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="MARVIN_",
        env_file=".env",
        extra="ignore"
    )


class ServerSettings(BaseSettings):
    """HTTP listener configuration."""
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    model_config = SettingsConfigDict(
        env_prefix="MCP_SERVER_",
        env_file=".env",
        extra="ignore"
    )


class Settings(BaseSettings):
    """Main application settings."""
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    marvin: MarvinSettings = Field(default_factory=MarvinSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    model_config = SettingsConfigDict(
        env_prefix="MCP_",
        env_file=".env",
        extra="ignore"
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    config_path = os.environ.get("MARVIN_MCP_CONFIG_PATH", "config/settings.yaml")
    return Settings.from_yaml(config_path)
