"""Tests for planbook/history.py — listing and applying snapshots."""

from planbook.history import HistoryBrowser
from planbook.models import Activity, Snapshot


def test_list_newest_first(gateway):
    for text in ("a", "b", "c"):
        gateway.save([Activity(18, 1, text)])
    browser = HistoryBrowser(gateway)
    assert [e.id for e in browser.list()] == [3, 2, 1]
    assert browser.get(2).activities[0].activity_text == "b"


def test_list_capped_at_history_limit(gateway):
    for i in range(52):
        gateway.save([Activity(18, 1, str(i))])
    assert len(HistoryBrowser(gateway).list()) == 50


def test_apply_to_grid():
    snapshot = Snapshot(id=1, evening_planner_id=1, activities=(Activity(19, 2, "Gym"), Activity(18, 5, "Read")))
    grid = HistoryBrowser.apply_to_grid(snapshot)
    assert grid.get(19, 2) == "Gym"
    assert grid.get(18, 5) == "Read"
    assert len(grid) == 2
