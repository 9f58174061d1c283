"""Configuration loader - reads config/settings.yaml, secrets fall back to env."""
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ROOT = Path.cwd()


class Settings:
    """Slack token and signing secret - from config file first, then env."""

    def __init__(self, project_root: Path | None = None):
        root = project_root or DEFAULT_ROOT
        config_path = root / "config" / "settings.yaml"
        secrets = {}
        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            secrets = data.get("secrets", {}) or {}
        self.slack_token = secrets.get("slack_token") or os.getenv("SLACK_TOKEN", "")
        self.signing_secret = secrets.get("signing_secret") or os.getenv("SLACK_SIGNING_SECRET", "")


class BotSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")
    host: str = "127.0.0.1"
    port: int = 8000
    verify_signatures: bool = True
    signature_max_age: int = Field(default=300, ge=0)
    shutdown_timeout: float = Field(default=10.0, ge=0)
    keyword_mode: Literal["regex", "substring"] = "regex"
    isolate_event_handlers: bool = True
    log_level: str = "INFO"


def load_config(project_root: Path | None = None) -> BotSettings:
    """Load bot settings from config/settings.yaml (missing file means defaults)."""
    root = project_root or DEFAULT_ROOT
    settings_path = root / "config" / "settings.yaml"

    settings_data: dict = {}
    if settings_path.exists():
        with open(settings_path, encoding="utf-8") as f:
            settings_data = yaml.safe_load(f) or {}

    return BotSettings(**settings_data.get("bot", {}))


def get_env(project_root: Path | None = None) -> Settings:
    """Load Slack secrets from config file or env."""
    return Settings(project_root)
