"""Pointer-gesture selection over the evening grid.

The engine turns pointer events into a set of selected cells:

- a quick press/release without movement is a *click* (toggle with the
  additive modifier, select-only otherwise)
- a press followed by movement past ``drag_threshold`` is a *drag*, which
  selects the rectangle between the anchor cell and the hovered cell

Whenever a gesture leaves a non-empty selection behind (and no press or
drag is in progress) the engine schedules ``on_edit_requested`` after a short debounce.
The timer comes from an injected ``schedule(delay_s, callback)`` function
returning a handle with ``stop()``, so the engine works under Textual's
``set_timer`` as well as in tests.

Coordinates are in whatever unit the view reports (pixels, terminal cells);
times are seconds from ``clock``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Protocol

from planbook.models import CellKey


class TimerHandle(Protocol):
    def stop(self) -> Any: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


class GestureState(str, Enum):
    IDLE = "idle"
    ARMED = "armed_for_click"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class _Press:
    anchor: CellKey
    x: float
    y: float
    at: float
    additive: bool


def cell_rect(a: CellKey, b: CellKey) -> set[CellKey]:
    """All cells in the rectangle spanned by *a* and *b* (inclusive)."""
    return {
        CellKey(hour, day)
        for hour in range(min(a.hour, b.hour), max(a.hour, b.hour) + 1)
        for day in range(min(a.day, b.day), max(a.day, b.day) + 1)
    }


class SelectionEngine:
    def __init__(
        self,
        schedule: Scheduler | None = None,
        on_edit_requested: Callable[[], None] | None = None,
        drag_threshold: float = 5,
        click_max_s: float = 0.3,
        debounce_s: float = 0.15,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._schedule = schedule
        self.on_edit_requested = on_edit_requested
        self.drag_threshold = drag_threshold
        self.click_max_s = click_max_s
        self.debounce_s = debounce_s
        self._clock = clock

        self._selection: set[CellKey] = set()
        self._state = GestureState.IDLE
        self._press: _Press | None = None
        self._base: frozenset[CellKey] = frozenset()
        self._hover: CellKey | None = None
        self._timer: TimerHandle | None = None

    # ── Read-only views ────────────────────────────────────────

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def anchor(self) -> CellKey | None:
        return self._press.anchor if self._press else None

    @property
    def selection(self) -> frozenset[CellKey]:
        return frozenset(self._selection)

    @property
    def edit_pending(self) -> bool:
        return self._timer is not None

    def is_selected(self, key: CellKey) -> bool:
        return key in self._selection

    # ── Pointer events ─────────────────────────────────────────

    def pointer_down(
        self,
        cell: CellKey,
        x: float,
        y: float,
        additive: bool = False,
        now: float | None = None,
    ) -> None:
        self._cancel_debounce()
        if not additive:
            self._selection.clear()
        self._press = _Press(cell, x, y, self._now(now), additive)
        self._base = frozenset(self._selection)
        self._hover = cell
        self._state = GestureState.ARMED
        self._sync_debounce()

    def pointer_move(self, x: float, y: float) -> None:
        if self._state is not GestureState.ARMED or self._press is None:
            return
        distance = abs(x - self._press.x) + abs(y - self._press.y)
        if distance > self.drag_threshold:
            self._start_drag()

    def pointer_enter(self, cell: CellKey, additive: bool | None = None) -> None:
        """The pointer moved onto *cell* while the button may be held."""
        if self._press is None or cell == self._hover:
            return
        if self._state is GestureState.ARMED:
            self._start_drag()
        self._hover = cell
        if self._state is GestureState.DRAGGING:
            self._select_span(cell, self._press.additive if additive is None else additive)

    def pointer_up(self, additive: bool | None = None, now: float | None = None) -> None:
        press = self._press
        if press is not None and self._state is GestureState.ARMED:
            held = press.additive if additive is None else additive
            if self._now(now) - press.at < self.click_max_s:
                self._click(press.anchor, held)
        self._state = GestureState.IDLE
        self._press = None
        self._hover = None
        self._sync_debounce()

    # ── Direct manipulation ────────────────────────────────────

    def toggle(self, cell: CellKey) -> None:
        if cell in self._selection:
            self._selection.discard(cell)
        else:
            self._selection.add(cell)
        self._sync_debounce()

    def select(self, cells: Iterable[CellKey], additive: bool = False) -> None:
        if not additive:
            self._selection.clear()
        self._selection.update(cells)
        self._sync_debounce()

    def clear(self) -> None:
        """Drop the selection and any pending edit request."""
        self._selection.clear()
        self._cancel_debounce()

    def reset(self) -> None:
        """Back to Idle with nothing selected (view unmount, grid replaced)."""
        self.clear()
        self._state = GestureState.IDLE
        self._press = None
        self._hover = None
        self._base = frozenset()

    # ── Internals ──────────────────────────────────────────────

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def _start_drag(self) -> None:
        assert self._press is not None
        self._state = GestureState.DRAGGING
        self._select_span(self._press.anchor, self._press.additive)

    def _select_span(self, cell: CellKey, additive: bool) -> None:
        assert self._press is not None
        span = cell_rect(self._press.anchor, cell)
        self._selection = set(self._base | span) if additive else span
        self._sync_debounce()

    def _click(self, anchor: CellKey, additive: bool) -> None:
        if additive:
            if anchor in self._selection:
                self._selection.discard(anchor)
            else:
                self._selection.add(anchor)
        elif anchor not in self._selection:
            self._selection = {anchor}

    def _sync_debounce(self) -> None:
        self._cancel_debounce()
        if not self._selection or self._state is not GestureState.IDLE:
            return
        if self._schedule is not None:
            self._timer = self._schedule(self.debounce_s, self._fire)

    def _cancel_debounce(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _fire(self) -> None:
        self._timer = None
        if self._selection and self._state is GestureState.IDLE and self.on_edit_requested:
            self.on_edit_requested()
