"""Evening grid model: 5 weekdays x 8 evening hours of activity text.

A Grid is a value. ``upsert_many`` returns a new grid and never touches the
receiver, so a view can hold the previous grid while an edit is applied.
"""

from __future__ import annotations

from typing import Iterable

from planbook.models import Activity, CellKey


class Grid:
    """Mapping of CellKey -> non-empty activity text."""

    __slots__ = ("_cells",)

    def __init__(self, cells: dict[CellKey, str] | None = None) -> None:
        self._cells: dict[CellKey, str] = {}
        for key, text in (cells or {}).items():
            text = (text or "").strip()
            if text:
                self._cells[key] = text

    @classmethod
    def from_activities(cls, activities: Iterable[Activity]) -> Grid:
        return cls().upsert_many(activities)

    def get(self, hour: int, day: int) -> str:
        """Activity text at (hour, day), or '' when the cell is empty."""
        return self._cells.get(CellKey(hour, day), "")

    def text_at(self, key: CellKey) -> str:
        return self._cells.get(key, "")

    def values_for(self, keys: Iterable[CellKey]) -> list[str]:
        return [self._cells.get(k, "") for k in keys]

    def upsert_many(self, batch: Iterable[Activity]) -> Grid:
        """Return a new grid with every cell in *batch* set (or cleared if blank).

        Each entry fully determines its cell; for repeated keys the last one wins.
        """
        cells = dict(self._cells)
        for activity in batch:
            key = activity.key
            text = (activity.activity_text or "").strip()
            if text:
                cells[key] = text
            else:
                cells.pop(key, None)
        grid = Grid()
        grid._cells = cells
        return grid

    def to_activity_list(self) -> list[Activity]:
        """Non-empty cells in ascending (hour, day) order: the save payload."""
        return [
            Activity(time_hour=key.hour, day_of_week=key.day, activity_text=self._cells[key])
            for key in sorted(self._cells)
        ]

    def keys(self) -> list[CellKey]:
        return sorted(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, key: object) -> bool:
        return key in self._cells

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        return hash(frozenset(self._cells.items()))

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in sorted(self._cells.items()))
        return f"Grid({inner})"
