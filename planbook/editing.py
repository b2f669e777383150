"""Batch editing of the selected evening cells."""

from __future__ import annotations

from typing import Iterable

from planbook.errors import ValidationError
from planbook.grid import Grid
from planbook.models import Activity, CellKey
from planbook.selection import SelectionEngine


def prefill_for(selection: Iterable[CellKey], grid: Grid) -> str:
    """Shared text of the selected cells, or '' if they differ or are all empty.

    Empty cells count as a differing value, so a selection mixing one filled
    cell with blanks gets no prefill.
    """
    values = set(grid.values_for(selection))
    if len(values) == 1:
        return values.pop()
    return ""


def build_batch(text: str, selection: Iterable[CellKey]) -> list[Activity]:
    """One Activity per selected cell carrying the trimmed *text*.

    Raises ValidationError for blank text: input is never dropped silently.
    """
    value = (text or "").strip()
    if not value:
        raise ValidationError("Activity text is required")
    keys = sorted(set(selection))
    if not keys:
        raise ValidationError("No cells selected")
    return [Activity(time_hour=k.hour, day_of_week=k.day, activity_text=value) for k in keys]


class EditSession:
    """Editor state for one batch edit over the engine's current selection."""

    def __init__(self, engine: SelectionEngine) -> None:
        self.engine = engine
        self.draft: str = ""
        self.is_open: bool = False
        self._cells: frozenset[CellKey] = frozenset()

    @property
    def cells(self) -> frozenset[CellKey]:
        return self._cells

    def open(self, selection: Iterable[CellKey], grid: Grid) -> str | None:
        """Start editing; returns the prefill text, or None for an empty selection."""
        cells = frozenset(selection)
        if not cells:
            return None
        self._cells = cells
        self.draft = prefill_for(cells, grid)
        self.is_open = True
        return self.draft

    def commit(self, text: str, selection: Iterable[CellKey] | None = None) -> list[Activity]:
        """Validate *text* and produce the upsert batch.

        On ValidationError the session stays open with *text* kept as the
        draft; the grid and the selection are untouched. Closing the session
        is the caller's job once the grid reflects the batch (see ``close``).
        """
        self.draft = text
        cells = self._cells if selection is None else frozenset(selection)
        return build_batch(text, cells)

    def close(self) -> None:
        """Finish a committed edit: reset the draft and clear the selection."""
        self.draft = ""
        self.is_open = False
        self._cells = frozenset()
        self.engine.clear()

    def cancel(self) -> None:
        """Discard the draft and the selection; the grid is not touched."""
        self.close()
