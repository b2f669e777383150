"""Settings loaded from planner/config.yaml with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from planbook.fileio import read_yaml, write_yaml_atomic
from planbook.workspace import config_path, workspace_root


DEFAULT_SERVER_URL = "http://127.0.0.1:8000"


@dataclass
class Settings:
    timezone: str = "UTC"
    server_url: str = DEFAULT_SERVER_URL
    request_timeout_s: float = 10.0
    autosave_minutes: float = 5.0
    # Selection gesture tuning
    drag_threshold: int = 5
    click_max_ms: int = 300
    edit_debounce_ms: int = 150
    history_limit: int = 50
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            timezone=str(d.get("timezone", "UTC")),
            server_url=str(d.get("server_url", DEFAULT_SERVER_URL)).rstrip("/"),
            request_timeout_s=float(d.get("request_timeout_s", 10.0)),
            autosave_minutes=float(d.get("autosave_minutes", 5.0)),
            drag_threshold=int(d.get("drag_threshold", 5)),
            click_max_ms=int(d.get("click_max_ms", 300)),
            edit_debounce_ms=int(d.get("edit_debounce_ms", 150)),
            history_limit=int(d.get("history_limit", 50)),
            log_level=str(d.get("log_level", "INFO")).upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "server_url": self.server_url,
            "request_timeout_s": self.request_timeout_s,
            "autosave_minutes": self.autosave_minutes,
            "drag_threshold": self.drag_threshold,
            "click_max_ms": self.click_max_ms,
            "edit_debounce_ms": self.edit_debounce_ms,
            "history_limit": self.history_limit,
            "log_level": self.log_level,
        }


def load_settings(root: Path | None = None) -> Settings:
    """Read config.yaml, then apply PLANBOOK_SERVER_URL / PLANBOOK_LOG_LEVEL."""
    if root is None:
        root = workspace_root()
    settings = Settings.from_dict(read_yaml(config_path(root)))
    server_url = os.environ.get("PLANBOOK_SERVER_URL")
    if server_url:
        settings.server_url = server_url.rstrip("/")
    log_level = os.environ.get("PLANBOOK_LOG_LEVEL")
    if log_level:
        settings.log_level = log_level.upper()
    return settings


def save_settings(settings: Settings, root: Path | None = None) -> None:
    write_yaml_atomic(config_path(root), settings.to_dict())
