"""Server-side evening planner store with append-only history.

Layout of planner/evening.json::

    {
      "next_planner_id": 3,
      "next_history_id": 3,
      "planners": [{"id": 3, "is_active": true, "created_at": "...", "activities": [...]}, ...],
      "history":  [{"id": 3, "evening_planner_id": 3, "created_at": "...", "snapshot_data": "[...]"}, ...]
    }

A save deactivates the current planner, creates a new active one holding the
full activity set, and appends a snapshot, all in one atomic file write.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

from planbook.errors import NotFoundError, ValidationError
from planbook.fileio import next_id, read_json, write_json_atomic
from planbook.grid import Grid
from planbook.models import Activity, EveningPlanner, HistoryEntry, Snapshot, activities_from_list
from planbook.workspace import evening_path, timestamp, workspace_root

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50

_write_lock = threading.Lock()


def _load(root: Path) -> dict[str, Any]:
    doc = read_json(evening_path(root))
    doc.setdefault("planners", [])
    doc.setdefault("history", [])
    return doc


def get_active(root: Path | None = None) -> EveningPlanner | None:
    """The active planner with its activities ordered by (hour, day), or None."""
    if root is None:
        root = workspace_root()
    doc = _load(root)
    for p in doc["planners"]:
        if p.get("is_active"):
            planner = EveningPlanner.from_dict(p)
            planner.activities = Grid.from_activities(planner.activities).to_activity_list()
            return planner
    return None


def save_activities(activities: list[Activity] | list[dict[str, Any]], root: Path | None = None) -> EveningPlanner:
    """Replace the active grid with *activities* and record a history snapshot.

    Entries with blank text are dropped; for repeated keys the last entry wins.
    Out-of-range cells raise ValidationError before anything is written.
    """
    if root is None:
        root = workspace_root()
    batch = [a if isinstance(a, Activity) else Activity.from_dict(a) for a in activities]
    resulting = Grid.from_activities(batch).to_activity_list()

    with _write_lock:
        doc = _load(root)
        for p in doc["planners"]:
            p["is_active"] = False

        now = timestamp(root)
        planner = EveningPlanner(
            id=next_id(doc, "next_planner_id"),
            is_active=True,
            created_at=now,
            activities=resulting,
        )
        doc["planners"].append(planner.to_dict())

        snapshot = Snapshot(
            id=next_id(doc, "next_history_id"),
            evening_planner_id=planner.id,
            created_at=now,
            activities=tuple(resulting),
        )
        doc["history"].append(snapshot.to_dict())
        write_json_atomic(evening_path(root), doc)

    logger.info("saved evening planner %s (%d activities)", planner.id, len(resulting))
    return planner


def list_history(limit: int = HISTORY_LIMIT, root: Path | None = None) -> list[HistoryEntry]:
    """Snapshots newest first, capped at *limit*."""
    if root is None:
        root = workspace_root()
    doc = _load(root)
    planner_created = {int(p["id"]): str(p.get("created_at", "")) for p in doc["planners"]}
    rows = sorted(
        doc["history"],
        key=lambda h: (str(h.get("created_at", "")), int(h.get("id", 0))),
        reverse=True,
    )
    entries = []
    for h in rows[: max(0, limit)]:
        entry = HistoryEntry.from_dict(h)
        entry.planner_created_at = planner_created.get(entry.evening_planner_id, "")
        entries.append(entry)
    return entries


def get_history(history_id: int, root: Path | None = None) -> Snapshot:
    if root is None:
        root = workspace_root()
    for h in _load(root)["history"]:
        if int(h.get("id", 0)) == history_id:
            return Snapshot.from_dict(h)
    raise NotFoundError("History not found")


def parse_payload(payload: Any) -> list[Activity]:
    """Validate a POST body of the form {"activities": [...]}."""
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object")
    return activities_from_list(payload.get("activities") or [])
