"""Pomodoro session log.

Records sessions started from the client (task name + planned length) and
marks them complete. The countdown itself runs in the client.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from planbook.errors import NotFoundError, ValidationError
from planbook.fileio import next_id, read_json, write_json_atomic
from planbook.models import PomodoroSession
from planbook.workspace import get_user_timezone, pomodoro_path, timestamp, workspace_root

logger = logging.getLogger(__name__)

LIST_LIMIT = 50
DEFAULT_MINUTES = 25

_write_lock = threading.Lock()


def _load(root: Path) -> dict[str, Any]:
    doc = read_json(pomodoro_path(root))
    doc.setdefault("sessions", [])
    return doc


def _sessions(root: Path) -> list[PomodoroSession]:
    return [PomodoroSession.from_dict(s) for s in _load(root)["sessions"]]


def list_sessions(limit: int = LIST_LIMIT, root: Path | None = None) -> list[PomodoroSession]:
    """Newest first."""
    if root is None:
        root = workspace_root()
    sessions = sorted(_sessions(root), key=lambda s: (s.created_at, s.id), reverse=True)
    return sessions[:limit]


def start_session(task_name: str = "", duration_minutes: int | None = None, root: Path | None = None) -> PomodoroSession:
    """Record a new session starting now."""
    if root is None:
        root = workspace_root()
    try:
        minutes = int(duration_minutes or DEFAULT_MINUTES)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"duration_minutes must be an integer: {duration_minutes!r}") from e
    if minutes <= 0:
        raise ValidationError("duration_minutes must be positive")

    with _write_lock:
        doc = _load(root)
        now = timestamp(root)
        session = PomodoroSession(
            id=next_id(doc, "next_id"),
            task_name=task_name or "",
            duration_minutes=minutes,
            started_at=now,
            created_at=now,
        )
        doc["sessions"].append(session.to_dict())
        write_json_atomic(pomodoro_path(root), doc)
    logger.info("pomodoro %s started (%d min)", session.id, minutes)
    return session


def complete_session(session_id: int, root: Path | None = None) -> PomodoroSession:
    if root is None:
        root = workspace_root()
    with _write_lock:
        doc = _load(root)
        for i, data in enumerate(doc["sessions"]):
            if int(data.get("id", 0)) == session_id:
                session = PomodoroSession.from_dict(data)
                session.completed = True
                session.completed_at = timestamp(root)
                doc["sessions"][i] = session.to_dict()
                write_json_atomic(pomodoro_path(root), doc)
                return session
    raise NotFoundError("Session not found")


def delete_session(session_id: int, root: Path | None = None) -> bool:
    """Remove a session. Deleting an unknown id is not an error."""
    if root is None:
        root = workspace_root()
    with _write_lock:
        doc = _load(root)
        kept = [s for s in doc["sessions"] if int(s.get("id", 0)) != session_id]
        if len(kept) == len(doc["sessions"]):
            return False
        doc["sessions"] = kept
        write_json_atomic(pomodoro_path(root), doc)
    return True


def get_pomodoro_stats(days: int = 7, root: Path | None = None) -> dict[str, int]:
    """Session totals over the last N days."""
    if root is None:
        root = workspace_root()
    cutoff = datetime.now(get_user_timezone(root)) - timedelta(days=days)
    recent = []
    for s in _sessions(root):
        try:
            created = datetime.fromisoformat(s.created_at)
        except ValueError:
            continue
        if created >= cutoff:
            recent.append(s)
    return {
        "total": len(recent),
        "completed": sum(1 for s in recent if s.completed),
    }
