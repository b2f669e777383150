#!/usr/bin/env python3
"""Planbook TUI: the evening grid in the terminal, powered by Textual.

Click a cell, drag across cells, or ctrl/meta-click to add cells; after a
short pause the activity editor opens for the whole selection. The keyboard
works too: arrows move the cursor, space toggles the cell under it, enter
opens the editor.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable

from rich.text import Text
from textual import events, on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widget import Widget
from textual.widgets import Footer, Header, Input, Label, ListItem, ListView, Static

from planbook import (
    DAY_LABELS,
    DAYS,
    HOURS,
    CellKey,
    EveningBoard,
    HistoryEntry,
    PlannerError,
    PlannerGateway,
    SaveInProgressError,
    Settings,
    ValidationError,
    load_settings,
    setup_logging,
    workspace_root,
)

logger = logging.getLogger("planbook.tui")

CSS = """
Screen {
    layout: vertical;
}

#grid-title {
    padding: 1 2 0 2;
    text-style: bold;
}

#grid-hint {
    padding: 0 2 1 2;
    color: $text-muted;
}

EveningGridView {
    height: auto;
    margin: 0 2;
}

#status-line {
    padding: 1 2;
    color: $text-muted;
}

EditScreen, HistoryScreen {
    align: center middle;
}

#edit-dialog, #history-dialog {
    width: 64;
    height: auto;
    max-height: 80%;
    padding: 1 2;
    border: tall $primary;
    background: $surface;
}

#history-list {
    height: auto;
    max-height: 20;
}
"""


# ── Grid widget ────────────────────────────────────────────────


class EveningGridView(Widget, can_focus=True):
    """Renders the board's grid and feeds pointer events to its engine."""

    TIME_COL = 7
    CELL_W = 14

    BINDINGS = [
        Binding("up", "move(-1, 0)", "Up", show=False),
        Binding("down", "move(1, 0)", "Down", show=False),
        Binding("left", "move(0, -1)", "Left", show=False),
        Binding("right", "move(0, 1)", "Right", show=False),
        Binding("space", "toggle_cell", "Toggle"),
        Binding("enter", "edit", "Edit"),
    ]

    cursor: reactive[CellKey] = reactive(CellKey(HOURS[0], DAYS[0]))

    def __init__(self, board: EveningBoard, **kwargs) -> None:
        super().__init__(**kwargs)
        self.board = board

    def render(self) -> Text:
        text = Text()
        text.append(" " * self.TIME_COL)
        for day in DAYS:
            text.append(DAY_LABELS[day].center(self.CELL_W), style="bold")
        text.append("\n")
        for hour in HOURS:
            text.append(f"{hour:02d}:00".ljust(self.TIME_COL), style="dim")
            for day in DAYS:
                key = CellKey(hour, day)
                label = self.board.grid.text_at(key)
                if len(label) > self.CELL_W - 2:
                    label = label[: self.CELL_W - 3] + "…"
                style = ""
                if self.board.engine.is_selected(key):
                    style = "reverse"
                elif key == self.cursor and self.has_focus:
                    style = "underline"
                text.append(f" {label.ljust(self.CELL_W - 2)} ", style=style or None)
            text.append("\n")
        return text

    def get_content_height(self, container, viewport, width: int) -> int:
        return len(HOURS) + 1

    def cell_at(self, x: int, y: int) -> CellKey | None:
        row = y - 1
        col = (x - self.TIME_COL) // self.CELL_W
        if x < self.TIME_COL or not 0 <= row < len(HOURS) or not 0 <= col < len(DAYS):
            return None
        return CellKey(HOURS[row], DAYS[col])

    # Pointer events

    def on_mouse_down(self, event: events.MouseDown) -> None:
        cell = self.cell_at(event.x, event.y)
        if cell is None:
            return
        self.capture_mouse()
        self.cursor = cell
        self.board.engine.pointer_down(cell, event.screen_x, event.screen_y, additive=event.ctrl or event.meta)
        self.refresh()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        engine = self.board.engine
        if engine.anchor is None:
            return
        engine.pointer_move(event.screen_x, event.screen_y)
        cell = self.cell_at(event.x, event.y)
        if cell is not None:
            engine.pointer_enter(cell, additive=event.ctrl or event.meta)
        self.refresh()

    def on_mouse_up(self, event: events.MouseUp) -> None:
        self.release_mouse()
        if self.board.engine.anchor is None:
            return
        self.board.engine.pointer_up(additive=event.ctrl or event.meta)
        self.refresh()

    # Keyboard

    def action_move(self, d_hour: int, d_day: int) -> None:
        hour = min(max(self.cursor.hour + d_hour, HOURS[0]), HOURS[-1])
        day = min(max(self.cursor.day + d_day, DAYS[0]), DAYS[-1])
        self.cursor = CellKey(hour, day)

    def action_toggle_cell(self) -> None:
        self.board.engine.toggle(self.cursor)
        self.refresh()

    def action_edit(self) -> None:
        if not self.board.engine.selection:
            self.board.engine.select([self.cursor])
        self.board.request_edit()
        self.refresh()

    def watch_cursor(self) -> None:
        self.refresh()


# ── Modal screens ──────────────────────────────────────────────


class EditScreen(ModalScreen[str | None]):
    """One text value for every selected cell."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, prefill: str, count: int) -> None:
        super().__init__()
        self.prefill = prefill
        self.count = count

    def compose(self) -> ComposeResult:
        with Vertical(id="edit-dialog"):
            yield Label(f"The same activity will be saved to {self.count} cell(s).")
            yield Input(value=self.prefill, placeholder="Activity…", id="edit-input")

    def on_mount(self) -> None:
        self.query_one("#edit-input", Input).focus()

    @on(Input.Submitted, "#edit-input")
    def _submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class HistoryScreen(ModalScreen[int | None]):
    """Pick a saved snapshot to load into the grid."""

    BINDINGS = [Binding("escape", "cancel", "Close")]

    def __init__(self, entries: list[HistoryEntry]) -> None:
        super().__init__()
        self.entries = entries

    def compose(self) -> ComposeResult:
        with Vertical(id="history-dialog"):
            yield Label("Evening planner history", classes="section-title")
            if not self.entries:
                yield Label("(no history yet)")
            else:
                yield ListView(
                    *[ListItem(Label(f"#{e.id}  {e.created_at[:16].replace('T', ' ')}"), id=f"h-{e.id}") for e in self.entries],
                    id="history-list",
                )

    @on(ListView.Selected)
    def _pick(self, event: ListView.Selected) -> None:
        item_id = event.item.id or ""
        self.dismiss(int(item_id.removeprefix("h-")))

    def action_cancel(self) -> None:
        self.dismiss(None)


# ── Main app ───────────────────────────────────────────────────


class PlanbookApp(App):
    """Planbook: evening grid planner."""

    TITLE = "Planbook"
    CSS = CSS

    BINDINGS = [
        Binding("ctrl+s", "save", "Save"),
        Binding("ctrl+l", "reload", "Reload"),
        Binding("h", "history", "History"),
        Binding("escape", "clear_selection", "Clear"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, gateway: PlannerGateway, settings: Settings) -> None:
        super().__init__()
        self.board = EveningBoard(
            gateway,
            settings,
            schedule=self._schedule,
            on_edit_requested=self._open_editor,
        )
        self._quit_requested = False

    def _schedule(self, delay: float, callback: Callable[[], None]) -> Timer:
        return self.set_timer(delay, callback)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Label("EVENING PLANNER", id="grid-title")
        yield Label("Click or drag to select cells; ctrl/meta-click adds cells.", id="grid-hint")
        yield EveningGridView(self.board, id="grid")
        yield Static(id="status-line")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(EveningGridView).focus()
        minutes = self.board.settings.autosave_minutes
        if minutes > 0:
            self.set_interval(minutes * 60, self._autosave)
        self._reload()

    def _refresh_grid(self) -> None:
        self.query_one(EveningGridView).refresh()
        status = f"planner #{self.board.planner_id}" if self.board.planner_id else "not saved yet"
        if self.board.dirty:
            status += " · unsaved changes"
        self.query_one("#status-line", Static).update(status)

    # ── Editing ────────────────────────────────────────────────

    def _open_editor(self, prefill: str) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        count = len(self.board.session.cells)
        self.push_screen(EditScreen(prefill, count), callback=self._on_edit_done)

    def _on_edit_done(self, text: str | None) -> None:
        if text is None:
            self.board.cancel_edit()
            self._refresh_grid()
            return
        try:
            grid = self.board.apply_edit(text)
        except ValidationError as e:
            self.notify(str(e), title="Activity required", severity="warning")
            self._open_editor(text)
            return
        self._refresh_grid()
        if grid is not None:
            self._save_edit(self.board.session.cells)

    @work(thread=True)
    def _save_edit(self, cells: frozenset[CellKey]) -> None:
        try:
            self.board.save()
        except PlannerError as e:
            logger.warning("save after edit failed: %s", e)
            self.call_from_thread(self.notify, f"Save failed: {e}", title="Error", severity="error")
            self.call_from_thread(self.board.request_edit)
        else:
            self.call_from_thread(self.board.finish_edit, cells)
            self.call_from_thread(self.notify, "Saved", severity="information")
        self.call_from_thread(self._refresh_grid)

    # ── Actions ────────────────────────────────────────────────

    def action_clear_selection(self) -> None:
        self.board.engine.clear()
        self._refresh_grid()

    def action_save(self) -> None:
        self._save()

    @work(thread=True)
    def _save(self) -> None:
        try:
            planner_id = self.board.save()
        except SaveInProgressError:
            self.call_from_thread(self.notify, "A save is already running", severity="warning")
        except PlannerError as e:
            self.call_from_thread(self.notify, f"Save failed: {e}", title="Error", severity="error")
        else:
            self.call_from_thread(self.notify, f"Saved as planner #{planner_id}", title="Saved")
        self.call_from_thread(self._refresh_grid)

    @work(thread=True)
    def _autosave(self) -> None:
        if self.board.autosave():
            self.call_from_thread(self.notify, "Autosaved", severity="information")
            self.call_from_thread(self._refresh_grid)

    def action_reload(self) -> None:
        self._reload()

    @work(thread=True, exclusive=True, group="fetch")
    def _reload(self) -> None:
        try:
            planner = self.board.gateway.load_active()
        except PlannerError as e:
            self.call_from_thread(self.notify, f"Could not load planner: {e}", title="Error", severity="error")
            return
        self.call_from_thread(self.board.show_planner, planner)
        self.call_from_thread(self._refresh_grid)

    def action_history(self) -> None:
        self._fetch_history()

    @work(thread=True, exclusive=True, group="fetch")
    def _fetch_history(self) -> None:
        try:
            entries = self.board.list_history()
        except PlannerError as e:
            self.call_from_thread(self.notify, f"Could not load history: {e}", title="Error", severity="error")
            return
        self.call_from_thread(self._show_history, entries)

    def _show_history(self, entries: list[HistoryEntry]) -> None:
        self.push_screen(HistoryScreen(entries), callback=self._on_history_pick)

    def _on_history_pick(self, history_id: int | None) -> None:
        if history_id is not None:
            self._restore(history_id)

    @work(thread=True, exclusive=True, group="fetch")
    def _restore(self, history_id: int) -> None:
        try:
            snapshot = self.board.history.get(history_id)
        except PlannerError as e:
            self.call_from_thread(self.notify, f"Could not load snapshot: {e}", title="Error", severity="error")
            return
        self.call_from_thread(self.board.show_snapshot, snapshot)
        self.call_from_thread(
            self.notify, "Snapshot loaded. Save to make it the active plan.", title="History"
        )
        self.call_from_thread(self._refresh_grid)

    def action_quit_app(self) -> None:
        if not self.board.dirty or self._quit_requested:
            self.exit()
            return
        self._quit_requested = True
        self.notify("Saving before exit…", title="Quit")
        self._save_and_exit()

    @work(thread=True, exclusive=True, group="quit")
    def _save_and_exit(self) -> None:
        try:
            self.board.save()
        except PlannerError as e:
            logger.warning("final save failed: %s", e)
            self.call_from_thread(
                self.notify,
                f"Unsaved changes could not be saved ({e}). Press q again to quit anyway.",
                title="Error",
                severity="error",
            )
            self.call_from_thread(self._refresh_grid)
            return
        self.call_from_thread(self.exit)


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set PLANBOOK_ROOT or create the directory first.")
        sys.exit(1)

    settings = load_settings(root)
    setup_logging("tui", settings.log_level, root)
    with PlannerGateway.from_settings(settings) as gateway:
        PlanbookApp(gateway, settings).run()


if __name__ == "__main__":
    main()
