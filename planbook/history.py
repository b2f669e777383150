"""Browse saved evening grids and restore one into memory."""

from __future__ import annotations

from planbook.gateway import PlannerGateway
from planbook.grid import Grid
from planbook.models import HistoryEntry, Snapshot


class HistoryBrowser:
    """Thin view over the server's history endpoints; nothing is cached."""

    def __init__(self, gateway: PlannerGateway) -> None:
        self.gateway = gateway

    def list(self) -> list[HistoryEntry]:
        """Newest first, at most 50 entries (server-side cap)."""
        return self.gateway.list_history()

    def get(self, history_id: int) -> Snapshot:
        """Raises NotFoundError for an unknown id."""
        return self.gateway.get_history(history_id)

    @staticmethod
    def apply_to_grid(snapshot: Snapshot) -> Grid:
        """A grid holding exactly the snapshot's activities. Not persisted."""
        return Grid.from_activities(snapshot.activities)
