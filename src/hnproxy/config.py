"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (HNPROXY__UPSTREAM__MAX_CONCURRENT_REQUESTS=4)
  2. hnproxy.yaml           (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("hnproxy")


def _find_config_file() -> str | None:
    """Return the path of the first hnproxy.yaml found, or None."""
    candidates = [
        Path("hnproxy.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "hnproxy.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    transport: Literal["stdio", "http"] = "stdio"
    host: str = "0.0.0.0"
    port: int = 8080
    auth_enabled: bool = False
    auth_key: str = ""
    # Browser origins accepted in addition to localhost
    allowed_origins: list[str] = []


class UpstreamSettings(BaseModel):
    base_url: str = "https://hacker-news.firebaseio.com/v0"
    max_concurrent_requests: int = Field(default=10, ge=1)
    request_timeout_seconds: float = Field(default=10.0, gt=0)


class CacheSettings(BaseModel):
    # Id list lives for duration_minutes, individual stories for twice that
    duration_minutes: int = Field(default=5, ge=0)
    sweep_interval_minutes: int = Field(default=10, ge=0)  # 0 disables the sweeper


class QuerySettings(BaseModel):
    # Only the first max_stories ids of the newest list are ever retrieved
    max_stories: int = Field(default=500, ge=1)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: HNPROXY__SERVER__PORT=9090
        env_prefix="HNPROXY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    upstream: UpstreamSettings = UpstreamSettings()
    cache: CacheSettings = CacheSettings()
    query: QuerySettings = QuerySettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
