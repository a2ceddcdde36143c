"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CHUNK_SIZE = 1000


class AIConfig(BaseModel):
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1024
    temperature: float = 0.7
    system_prompt: str = ""
    # Human turns kept in the running prompt
    max_turns: int = Field(default=8, ge=1)


class ReplyConfig(BaseModel):
    # Platform limits are 2000 (LINE bytes, Discord chars); stay well below
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)


class BotConfig(BaseModel):
    id: str
    platform: Literal["telegram", "discord"]
    token: str
    name: str = "AI"
    tone: str = ""
    activate_private_chats: bool = True
    ai: AIConfig = Field(default_factory=AIConfig)
    reply: ReplyConfig = Field(default_factory=ReplyConfig)


class AnthropicConfig(BaseModel):
    api_key: str
    base_url: str | None = None
    max_retries: int = 3
    timeout: int = 120


class StorageConfig(BaseModel):
    backend: Literal["sqlite", "memory"] = "sqlite"
    db_path: str = "./data/talkbot.db"
    # Records handed to update_history callbacks
    history_window: int = Field(default=100, ge=0)


class AppConfig(BaseModel):
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    data_dir: str = "./data"
    locale: str = "en"
    bots: list[BotConfig]
    anthropic: AnthropicConfig | None = None
    storage: StorageConfig = Field(default_factory=StorageConfig)


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


def _interpolate_env_vars(text: str, extra: dict[str, str] | None = None) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        if extra and var_name in extra:
            return extra[var_name]
        value = os.environ.get(var_name)
        if value is None:
            return match.group(0)
        return value

    return _ENV_VAR_PATTERN.sub(_replace, text)


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Load and validate configuration from YAML file with env-var interpolation."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    raw_text = config_file.read_text(encoding="utf-8")

    # data_dir may be referenced as ${data_dir} elsewhere in the file
    raw_data = yaml.safe_load(raw_text) or {}
    data_dir = _interpolate_env_vars(raw_data.get("data_dir", "./data"))

    interpolated = _interpolate_env_vars(raw_text, extra={"data_dir": data_dir})
    data = yaml.safe_load(interpolated) or {}

    return AppConfig(**data)
