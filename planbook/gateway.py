"""HTTP client for the evening planner REST endpoints.

Wraps an ``httpx.Client`` and translates transport failures and error
responses into the Planbook error taxonomy. Any ``httpx.Client`` works,
including FastAPI's ``TestClient``.

Only one save may be in flight at a time; a second ``save`` while the first
is pending raises SaveInProgressError instead of racing it.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable

import httpx

from planbook.config import Settings
from planbook.errors import NetworkError, NotFoundError, SaveInProgressError, ServerError
from planbook.models import Activity, EveningPlanner, HistoryEntry, Snapshot

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


class PlannerGateway:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if client is None:
            client = httpx.Client(base_url=base_url or Settings().server_url, timeout=timeout)
            self._owns_client = True
        else:
            self._owns_client = False
        self.client = client
        self._save_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> PlannerGateway:
        return cls(base_url=settings.server_url, timeout=settings.request_timeout_s)

    # ── Plumbing ───────────────────────────────────────────────

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(f"Could not reach the planner server: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(_error_detail(response))
        if response.status_code >= 400:
            raise ServerError(_error_detail(response), status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise ServerError(f"Malformed response from {path}", status_code=response.status_code) from e

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> PlannerGateway:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ── Evening planner ────────────────────────────────────────

    @property
    def saving(self) -> bool:
        return self._save_lock.locked()

    def load_active(self) -> EveningPlanner | None:
        data = self._request("GET", "/api/evening")
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ServerError("Unexpected evening planner payload")
        return EveningPlanner.from_dict(data)

    def save(self, activities: Iterable[Activity]) -> int:
        """Replace the active grid; returns the new planner id."""
        if not self._save_lock.acquire(blocking=False):
            raise SaveInProgressError("A save is already in progress")
        try:
            payload = {"activities": [a.to_dict() for a in activities]}
            body = self._request("POST", "/api/evening", json=payload)
        finally:
            self._save_lock.release()
        if not isinstance(body, dict) or body.get("success") is not True:
            raise ServerError("Save was not acknowledged by the server")
        return int(body["id"])

    def list_history(self) -> list[HistoryEntry]:
        rows = self._request("GET", "/api/evening/history")
        if not isinstance(rows, list):
            raise ServerError("Unexpected history payload")
        return [HistoryEntry.from_dict(r) for r in rows]

    def get_history(self, history_id: int) -> Snapshot:
        data = self._request("GET", f"/api/evening/history/{int(history_id)}")
        if not isinstance(data, dict):
            raise ServerError("Unexpected snapshot payload")
        return Snapshot.from_dict(data)
