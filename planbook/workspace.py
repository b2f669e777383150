"""Workspace root, timezone, path helpers for Planbook."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from planbook.fileio import read_yaml


def workspace_root() -> Path:
    """Get the workspace root directory (contains planner/)."""
    return Path(
        os.environ.get("PLANBOOK_ROOT", str(Path.home() / "planbook"))
    ).expanduser().resolve()


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get the timezone from config.yaml, defaulting to UTC."""
    if root is None:
        root = workspace_root()
    config = read_yaml(config_path(root))
    name = config.get("timezone")
    if name:
        try:
            return ZoneInfo(str(name))
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return ZoneInfo("UTC")


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in the user's timezone."""
    return now_local(root).date().isoformat()


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in the user's timezone."""
    tz = get_user_timezone(root)
    return datetime.now(tz)


def timestamp(root: Path | None = None) -> str:
    """ISO timestamp used for created_at / completed_at fields."""
    return now_local(root).isoformat(timespec="microseconds")


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "planner" / "config.yaml"


def evening_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "planner" / "evening.json"


def daily_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "planner" / "daily.json"


def pomodoro_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "planner" / "pomodoro.json"


def logs_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "planner" / "logs"
