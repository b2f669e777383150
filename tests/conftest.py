"""Shared test fixtures for Planbook tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from planbook.gateway import PlannerGateway


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a planner/config.yaml."""
    root = tmp_path / "workspace"
    (root / "planner").mkdir(parents=True)

    config = {
        "timezone": "UTC",
        "server_url": "http://testserver",
        "request_timeout_s": 5,
        "autosave_minutes": 5,
        "drag_threshold": 5,
        "click_max_ms": 300,
        "edit_debounce_ms": 150,
        "history_limit": 50,
        "log_level": "DEBUG",
    }
    (root / "planner" / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    # Set env var
    os.environ["PLANBOOK_ROOT"] = str(root)
    yield root
    # Cleanup
    if "PLANBOOK_ROOT" in os.environ:
        del os.environ["PLANBOOK_ROOT"]


@pytest.fixture
def client(workspace):
    """FastAPI TestClient bound to the temporary workspace."""
    from ui.app import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def gateway(client) -> PlannerGateway:
    """Gateway talking to the in-process app."""
    return PlannerGateway(client=client)


class FakeTimer:
    def __init__(self, delay: float, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeScheduler:
    """Stand-in for Textual's set_timer: timers only fire when told to."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.stopped]

    def fire(self) -> int:
        """Run every pending timer once; returns how many fired."""
        due = self.pending
        for timer in due:
            timer.stopped = True
            timer.callback()
        return len(due)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
