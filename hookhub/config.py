"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class GitHubConfig(BaseModel):
    secret: str = ""
    # Status returned when X-Hub-Signature does not match the body
    reject_status: int = 401


class SlackOptions(BaseModel):
    """Display fields stamped on every outgoing notification."""
    username: str = "GitHub"
    icon_emoji: str = ":octocat:"
    channel: str = "#general"


class SlackConfig(BaseModel):
    url: str = ""
    timeout: float = 10.0
    options: SlackOptions = Field(default_factory=SlackOptions)


class ServerConfig(BaseModel):
    bind: str = "0.0.0.0"
    port: int = 8080
    path_prefix: str = "/"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOOKHUB_",
        env_nested_delimiter="__",
        case_sensitive=False,
        frozen=True,
    )

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Env vars win over values handed in from the YAML file
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def get_config_dir() -> Path:
    env = os.environ.get("HOOKHUB_CONFIG_DIR")
    if env:
        return Path(env)
    xdg = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg) / "hookhub"


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config.

    The YAML file is taken from ``config_path``, then ``$HOOKHUB_CONFIG``,
    then ``<config dir>/config.yaml``. Environment variables override
    values from the file.
    """
    yaml_data: dict[str, Any] = {}

    if config_path is None:
        config_path = os.environ.get("HOOKHUB_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    return Settings(**yaml_data)
