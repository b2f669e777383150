"""Typed dataclasses for the Planbook data model.

All models use from_dict/to_dict for JSON serialization. Wire and store keys
are snake_case, matching the REST payloads. Unknown keys are ignored;
missing keys use defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from planbook.errors import ValidationError


# ── Evening grid bounds ───────────────────────────────────────

HOURS = tuple(range(17, 25))  # 17:00 .. 24:00
DAYS = tuple(range(1, 6))  # 1 = MON .. 5 = FRI
DAY_LABELS = {1: "MON", 2: "TUE", 3: "WED", 4: "THU", 5: "FRI"}


@dataclass(frozen=True, order=True)
class CellKey:
    """One (hour, day) coordinate of the evening grid."""

    hour: int
    day: int

    def __post_init__(self) -> None:
        if self.hour not in HOURS:
            raise ValidationError(f"hour out of range 17-24: {self.hour!r}")
        if self.day not in DAYS:
            raise ValidationError(f"day out of range 1-5: {self.day!r}")

    @classmethod
    def from_str(cls, s: str) -> CellKey:
        """Parse '18-2'."""
        parts = s.split("-")
        if len(parts) != 2:
            raise ValidationError(f"Invalid cell key: {s!r}")
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError as e:
            if isinstance(e, ValidationError):
                raise
            raise ValidationError(f"Invalid cell key: {s!r}") from e

    def to_str(self) -> str:
        return f"{self.hour}-{self.day}"

    def __str__(self) -> str:
        return self.to_str()


def all_cells() -> list[CellKey]:
    return [CellKey(h, d) for h in HOURS for d in DAYS]


@dataclass
class Activity:
    time_hour: int = 17
    day_of_week: int = 1
    activity_text: str = ""

    @property
    def key(self) -> CellKey:
        return CellKey(self.time_hour, self.day_of_week)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Activity:
        if not isinstance(d, dict):
            raise ValidationError(f"Activity must be an object, got {type(d).__name__}")
        try:
            hour = int(d.get("time_hour"))
            day = int(d.get("day_of_week"))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Activity needs integer time_hour/day_of_week: {d!r}") from e
        text = d.get("activity_text")
        return cls(
            time_hour=hour,
            day_of_week=day,
            activity_text="" if text is None else str(text),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_hour": self.time_hour,
            "day_of_week": self.day_of_week,
            "activity_text": self.activity_text,
        }


def activities_from_list(items: Any) -> list[Activity]:
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError("activities must be a list")
    return [Activity.from_dict(a) for a in items]


# ── Evening planner & history ─────────────────────────────────


@dataclass
class EveningPlanner:
    id: int = 0
    is_active: bool = True
    created_at: str = ""
    activities: list[Activity] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> EveningPlanner:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            id=int(d.get("id", 0)),
            is_active=bool(d.get("is_active", False)),
            created_at=str(d.get("created_at", "")),
            activities=activities_from_list(d.get("activities") or []),
        )

    def to_dict(self, with_activities: bool = True) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }
        if with_activities:
            d["activities"] = [a.to_dict() for a in self.activities]
        return d


@dataclass
class HistoryEntry:
    """One row of the history list (no snapshot payload)."""

    id: int = 0
    evening_planner_id: int = 0
    created_at: str = ""
    planner_created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HistoryEntry:
        return cls(
            id=int(d.get("id", 0)),
            evening_planner_id=int(d.get("evening_planner_id", 0)),
            created_at=str(d.get("created_at", "")),
            planner_created_at=str(d.get("planner_created_at", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "evening_planner_id": self.evening_planner_id,
            "created_at": self.created_at,
            "planner_created_at": self.planner_created_at,
        }


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of a saved grid. snapshot_data is opaque JSON on the wire."""

    id: int = 0
    evening_planner_id: int = 0
    created_at: str = ""
    activities: tuple[Activity, ...] = ()

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Snapshot:
        raw = d.get("snapshot_data", "[]")
        if isinstance(raw, str):
            try:
                raw = json.loads(raw or "[]")
            except json.JSONDecodeError as e:
                raise ValidationError(f"Corrupt snapshot_data: {e}") from e
        return cls(
            id=int(d.get("id", 0)),
            evening_planner_id=int(d.get("evening_planner_id", 0)),
            created_at=str(d.get("created_at", "")),
            activities=tuple(activities_from_list(raw)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "evening_planner_id": self.evening_planner_id,
            "created_at": self.created_at,
            "snapshot_data": json.dumps([a.to_dict() for a in self.activities], ensure_ascii=False),
        }


# ── Daily planner ─────────────────────────────────────────────

TIMELINE_HOURS = tuple(range(6, 25))
MEAL_TYPES = ("B", "L", "D", "S")  # breakfast, lunch, dinner, snack
WATER_CUPS = 8


@dataclass
class TimelineSlot:
    time_hour: int = 6
    plan_text: str = ""
    actual_text: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimelineSlot:
        return cls(
            time_hour=int(d.get("time_hour", 6)),
            plan_text=str(d.get("plan_text") or ""),
            actual_text=str(d.get("actual_text") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"time_hour": self.time_hour, "plan_text": self.plan_text, "actual_text": self.actual_text}


@dataclass
class Todo:
    priority: int = 0  # 1..6 ranked, 0 = unranked extra
    task_text: str = ""
    completed: bool = False
    order_index: int = 0

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Todo:
        return cls(
            priority=int(d.get("priority", 0) or 0),
            task_text=str(d.get("task_text") or ""),
            completed=bool(d.get("completed", False)),
            order_index=int(d.get("order_index", 0) or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority,
            "task_text": self.task_text,
            "completed": self.completed,
            "order_index": self.order_index,
        }


@dataclass
class WaterCup:
    cup_number: int = 1
    completed: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> WaterCup:
        return cls(cup_number=int(d.get("cup_number", 1)), completed=bool(d.get("completed", False)))

    def to_dict(self) -> dict[str, Any]:
        return {"cup_number": self.cup_number, "completed": self.completed}


@dataclass
class Meal:
    meal_type: str = "B"
    meal_text: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Meal:
        return cls(meal_type=str(d.get("meal_type", "B")), meal_text=str(d.get("meal_text") or ""))

    def to_dict(self) -> dict[str, Any]:
        return {"meal_type": self.meal_type, "meal_text": self.meal_text}


@dataclass
class DailyPlanner:
    date: str = ""
    id: int = 0
    goal: str = ""
    updated_at: str = ""
    timelines: list[TimelineSlot] = field(default_factory=list)
    todos: list[Todo] = field(default_factory=list)
    waters: list[WaterCup] = field(default_factory=list)
    meals: list[Meal] = field(default_factory=list)

    @classmethod
    def empty(cls, date: str) -> DailyPlanner:
        """A blank sheet: hours 6-24, six ranked + two extra todos, 8 cups, 4 meals."""
        todos = [Todo(priority=i + 1, order_index=i) for i in range(6)]
        todos += [Todo(priority=0, order_index=i) for i in range(2)]
        return cls(
            date=date,
            timelines=[TimelineSlot(time_hour=h) for h in TIMELINE_HOURS],
            todos=todos,
            waters=[WaterCup(cup_number=n) for n in range(1, WATER_CUPS + 1)],
            meals=[Meal(meal_type=t) for t in MEAL_TYPES],
        )

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DailyPlanner:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            date=str(d.get("date", "")),
            id=int(d.get("id", 0) or 0),
            goal=str(d.get("goal") or ""),
            updated_at=str(d.get("updated_at", "")),
            timelines=[TimelineSlot.from_dict(t) for t in (d.get("timelines") or [])],
            todos=[Todo.from_dict(t) for t in (d.get("todos") or [])],
            waters=[WaterCup.from_dict(w) for w in (d.get("waters") or [])],
            meals=[Meal.from_dict(m) for m in (d.get("meals") or [])],
        )

    def to_dict(self, with_sections: bool = True) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "goal": self.goal,
            "updated_at": self.updated_at,
        }
        if with_sections:
            d["timelines"] = [t.to_dict() for t in sorted(self.timelines, key=lambda t: t.time_hour)]
            d["todos"] = [t.to_dict() for t in sorted(self.todos, key=lambda t: (t.priority, t.order_index))]
            d["waters"] = [w.to_dict() for w in sorted(self.waters, key=lambda w: w.cup_number)]
            d["meals"] = [m.to_dict() for m in self.meals]
        return d


# ── Pomodoro ──────────────────────────────────────────────────


@dataclass
class PomodoroSession:
    id: int = 0
    task_name: str = ""
    duration_minutes: int = 25
    started_at: str = ""
    completed: bool = False
    completed_at: str | None = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PomodoroSession:
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            id=int(d.get("id", 0)),
            task_name=str(d.get("task_name") or ""),
            duration_minutes=int(d.get("duration_minutes") or 25),
            started_at=str(d.get("started_at", "")),
            completed=bool(d.get("completed", False)),
            completed_at=d.get("completed_at"),
            created_at=str(d.get("created_at", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_name": self.task_name,
            "duration_minutes": self.duration_minutes,
            "started_at": self.started_at,
            "completed": self.completed,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
        }


# ── Dashboard ─────────────────────────────────────────────────


@dataclass
class DashboardSummary:
    daily_planners: list[DailyPlanner] = field(default_factory=list)
    evening_planner: EveningPlanner | None = None
    total_todos: int = 0
    completed_todos: int = 0
    total_waters: int = 0
    completed_waters: int = 0
    pomodoro_total: int = 0
    pomodoro_completed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "daily_planners": [p.to_dict(with_sections=False) for p in self.daily_planners],
            "evening_planner": (
                self.evening_planner.to_dict(with_activities=False) if self.evening_planner else None
            ),
            "stats": {
                "total_planners": len(self.daily_planners),
                "completed_todos": self.completed_todos,
                "total_todos": self.total_todos,
                "completed_waters": self.completed_waters,
                "total_waters": self.total_waters,
                "pomodoro": {
                    "total": self.pomodoro_total,
                    "completed": self.pomodoro_completed,
                },
            },
        }
