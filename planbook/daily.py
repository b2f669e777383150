"""Daily planner storage: one sheet per date in planner/daily.json."""

from __future__ import annotations

import logging
import threading
from datetime import date as date_type
from pathlib import Path
from typing import Any

from planbook.errors import ValidationError
from planbook.fileio import next_id, read_json, write_json_atomic
from planbook.models import DailyPlanner, Meal, TimelineSlot, Todo, WaterCup
from planbook.workspace import daily_path, timestamp, workspace_root

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()

# payload key -> (model, natural key used to collapse duplicates)
_SECTIONS: dict[str, tuple[Any, Any]] = {
    "timelines": (TimelineSlot, lambda t: t.time_hour),
    "waters": (WaterCup, lambda w: w.cup_number),
    "meals": (Meal, lambda m: m.meal_type),
    "todos": (Todo, None),  # todos are a plain list, no natural key
}


def validate_date(value: Any) -> str:
    """Return *value* as an ISO date string or raise ValidationError."""
    if not value:
        raise ValidationError("Date is required")
    try:
        return date_type.fromisoformat(str(value)).isoformat()
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value}") from e


def _load(root: Path) -> dict[str, Any]:
    doc = read_json(daily_path(root))
    doc.setdefault("planners", {})
    return doc


def list_planners(root: Path | None = None) -> list[DailyPlanner]:
    """All sheets, newest date first, without their sections."""
    if root is None:
        root = workspace_root()
    planners = [DailyPlanner.from_dict(p) for p in _load(root)["planners"].values()]
    planners.sort(key=lambda p: p.date, reverse=True)
    return planners


def get_planner(date: str, root: Path | None = None) -> DailyPlanner | None:
    if root is None:
        root = workspace_root()
    date = validate_date(date)
    data = _load(root)["planners"].get(date)
    return DailyPlanner.from_dict(data) if data else None


def _dedupe(items: list[Any], key: Any) -> list[Any]:
    if key is None:
        return items
    by_key: dict[Any, Any] = {}
    for item in items:
        by_key[key(item)] = item
    return list(by_key.values())


def save_planner(payload: dict[str, Any], root: Path | None = None) -> DailyPlanner:
    """Create or update the sheet for payload['date'].

    ``goal`` is always overwritten; each section present in the payload
    replaces the stored section wholesale, absent sections are kept.
    """
    if root is None:
        root = workspace_root()
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object")
    date = validate_date(payload.get("date"))

    with _write_lock:
        doc = _load(root)
        existing = doc["planners"].get(date)
        if existing:
            planner = DailyPlanner.from_dict(existing)
        else:
            planner = DailyPlanner(date=date, id=next_id(doc, "next_id"))
        planner.goal = str(payload.get("goal") or "")
        for section, (model, key) in _SECTIONS.items():
            items = payload.get(section)
            if items is None:
                continue
            if not isinstance(items, list):
                raise ValidationError(f"{section} must be a list")
            setattr(planner, section, _dedupe([model.from_dict(i) for i in items], key))
        planner.updated_at = timestamp(root)
        doc["planners"][date] = planner.to_dict()
        write_json_atomic(daily_path(root), doc)

    logger.info("saved daily planner %s", date)
    return planner


def delete_planner(date: str, root: Path | None = None) -> bool:
    """Remove the sheet for *date*. Returns False when there was none."""
    if root is None:
        root = workspace_root()
    date = validate_date(date)
    with _write_lock:
        doc = _load(root)
        if doc["planners"].pop(date, None) is None:
            return False
        write_json_atomic(daily_path(root), doc)
    logger.info("deleted daily planner %s", date)
    return True
