"""Tests for planbook/daily.py — per-date sheets."""

import pytest

from planbook import daily
from planbook.errors import ValidationError


def test_validate_date():
    assert daily.validate_date("2026-03-02") == "2026-03-02"
    with pytest.raises(ValidationError, match="required"):
        daily.validate_date("")
    with pytest.raises(ValidationError, match="Invalid date"):
        daily.validate_date("2026-13-40")


def test_get_missing_planner(workspace):
    assert daily.get_planner("2026-03-02", root=workspace) is None


def test_save_creates_and_updates(workspace):
    first = daily.save_planner({"date": "2026-03-02", "goal": "Focus"}, root=workspace)
    assert first.id == 1
    second = daily.save_planner({"date": "2026-03-02", "goal": "Rest"}, root=workspace)
    assert second.id == 1
    assert daily.get_planner("2026-03-02", root=workspace).goal == "Rest"


def test_goal_always_overwritten(workspace):
    daily.save_planner({"date": "2026-03-02", "goal": "Focus"}, root=workspace)
    daily.save_planner({"date": "2026-03-02"}, root=workspace)
    assert daily.get_planner("2026-03-02", root=workspace).goal == ""


def test_sections_replace_only_when_present(workspace):
    daily.save_planner({
        "date": "2026-03-02",
        "todos": [{"priority": 1, "task_text": "Draft"}],
        "meals": [{"meal_type": "B", "meal_text": "Oats"}],
    }, root=workspace)
    daily.save_planner({"date": "2026-03-02", "todos": [{"priority": 2, "task_text": "Review"}]}, root=workspace)

    sheet = daily.get_planner("2026-03-02", root=workspace)
    assert [t.task_text for t in sheet.todos] == ["Review"]
    assert [m.meal_text for m in sheet.meals] == ["Oats"]


def test_sections_dedupe_by_natural_key(workspace):
    sheet = daily.save_planner({
        "date": "2026-03-02",
        "timelines": [{"time_hour": 9, "plan_text": "a"}, {"time_hour": 9, "plan_text": "b"}],
        "waters": [{"cup_number": 1}, {"cup_number": 1, "completed": True}],
    }, root=workspace)
    assert [(t.time_hour, t.plan_text) for t in sheet.timelines] == [(9, "b")]
    assert [w.completed for w in sheet.waters] == [True]


def test_section_must_be_list(workspace):
    with pytest.raises(ValidationError, match="todos"):
        daily.save_planner({"date": "2026-03-02", "todos": "none"}, root=workspace)


def test_list_newest_first(workspace):
    for d in ("2026-03-01", "2026-03-03", "2026-03-02"):
        daily.save_planner({"date": d}, root=workspace)
    assert [p.date for p in daily.list_planners(root=workspace)] == ["2026-03-03", "2026-03-02", "2026-03-01"]


def test_delete(workspace):
    daily.save_planner({"date": "2026-03-02"}, root=workspace)
    assert daily.delete_planner("2026-03-02", root=workspace) is True
    assert daily.delete_planner("2026-03-02", root=workspace) is False
