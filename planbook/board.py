"""Evening board: the state behind one mounted evening grid view.

Owns the Grid, the SelectionEngine, the EditSession and the HistoryBrowser
for a view, and runs the flows between them:

    pointer events -> engine -> (debounce) -> open editor -> commit
        -> grid updated optimistically -> gateway.save -> session closed

Edits are optimistic: the grid reflects a commit before the save request
goes out. If the save fails the edit stays in place (last write wins), the
selection stays, and the session keeps the draft so committing again retries.
"""

from __future__ import annotations

import logging
from typing import Callable

from planbook.config import Settings
from planbook.editing import EditSession
from planbook.errors import PlannerError
from planbook.gateway import PlannerGateway
from planbook.grid import Grid
from planbook.history import HistoryBrowser
from planbook.models import CellKey, EveningPlanner, HistoryEntry, Snapshot
from planbook.selection import Scheduler, SelectionEngine

logger = logging.getLogger(__name__)


class EveningBoard:
    def __init__(
        self,
        gateway: PlannerGateway,
        settings: Settings | None = None,
        schedule: Scheduler | None = None,
        on_edit_requested: Callable[[str], None] | None = None,
    ) -> None:
        if settings is None:
            settings = Settings()
        self.gateway = gateway
        self.settings = settings
        self.grid = Grid()
        self.planner_id: int | None = None
        self.dirty = False
        self.on_edit_requested = on_edit_requested

        self.engine = SelectionEngine(
            schedule=schedule,
            on_edit_requested=self.request_edit,
            drag_threshold=settings.drag_threshold,
            click_max_s=settings.click_max_ms / 1000,
            debounce_s=settings.edit_debounce_ms / 1000,
        )
        self.session = EditSession(self.engine)
        self.history = HistoryBrowser(gateway)

    # ── Loading ────────────────────────────────────────────────

    def load(self) -> Grid:
        """Replace the grid with the server's active grid (empty if none)."""
        return self.show_planner(self.gateway.load_active())

    def show_planner(self, planner: EveningPlanner | None) -> Grid:
        """Adopt an already fetched planner as the authoritative grid."""
        if planner is None:
            self.grid = Grid()
            self.planner_id = None
        else:
            self.grid = Grid.from_activities(planner.activities)
            self.planner_id = planner.id
        self._discard_edit()
        self.dirty = False
        return self.grid

    # ── Editing ────────────────────────────────────────────────

    def request_edit(self) -> None:
        """Open the editor on the current selection and notify the view."""
        prefill = self.open_editor()
        if prefill is not None and self.on_edit_requested is not None:
            self.on_edit_requested(prefill)

    def open_editor(self) -> str | None:
        """Open the edit session on the current selection.

        An open session is kept, draft included, only while the selection is
        the one it was opened on; a different selection starts a fresh
        session with its own prefill. An empty selection closes any open
        session and returns None.
        """
        selection = self.engine.selection
        if not selection:
            if self.session.is_open:
                self.session.cancel()
            return None
        if self.session.is_open and selection == self.session.cells:
            return self.session.draft
        return self.session.open(selection, self.grid)

    def commit_edit(self, text: str) -> Grid | None:
        """Apply *text* to every selected cell, then save.

        Returns None without saving when nothing is selected. ValidationError
        leaves everything unchanged. Gateway errors propagate after the grid
        was updated; the session stays open with the draft.
        """
        if self.apply_edit(text) is None:
            return None
        cells = self.session.cells
        self.save()
        self.finish_edit(cells)
        return self.grid

    def apply_edit(self, text: str) -> Grid | None:
        """Validate *text* and update the grid in memory; the session stays open.

        Returns None when there is no selection to edit.
        """
        if self.open_editor() is None:
            return None
        batch = self.session.commit(text)
        self.grid = self.grid.upsert_many(batch)
        self.dirty = True
        return self.grid

    def finish_edit(self, cells: frozenset[CellKey] | None = None) -> None:
        """Close the session once the grid reflects the edit.

        With *cells*, only a session still open on those cells is closed, so a
        newer selection made while the save was running survives.
        """
        if self.session.is_open and (cells is None or self.session.cells == cells):
            self.session.close()

    def cancel_edit(self) -> None:
        self.session.cancel()

    # ── Saving ─────────────────────────────────────────────────

    def save(self) -> int:
        """Send the whole grid to the server; returns the new planner id."""
        activities = self.grid.to_activity_list()
        planner_id = self.gateway.save(activities)
        self.planner_id = planner_id
        self.dirty = False
        logger.info("saved evening grid as planner %s (%d activities)", planner_id, len(activities))
        return planner_id

    def autosave(self) -> bool:
        """Periodic save; skipped while editing, while a save is pending, or when clean."""
        if self.session.is_open or self.gateway.saving or not self.dirty:
            return False
        try:
            self.save()
        except PlannerError as e:
            logger.warning("autosave failed: %s", e)
            return False
        return True

    # ── History ────────────────────────────────────────────────

    def list_history(self) -> list[HistoryEntry]:
        return self.history.list()

    def restore(self, history_id: int) -> Grid:
        """Load a snapshot into the grid. Call ``save`` to make it authoritative."""
        return self.show_snapshot(self.history.get(history_id))

    def show_snapshot(self, snapshot: Snapshot) -> Grid:
        self.grid = self.history.apply_to_grid(snapshot)
        self.planner_id = snapshot.evening_planner_id
        self._discard_edit()
        self.dirty = True
        logger.info("restored history snapshot %s (%d activities)", snapshot.id, len(self.grid))
        return self.grid

    def _discard_edit(self) -> None:
        if self.session.is_open:
            self.session.cancel()
        self.engine.reset()
