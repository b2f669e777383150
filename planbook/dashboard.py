"""Dashboard aggregation across the daily, evening and pomodoro stores."""

from __future__ import annotations

from pathlib import Path

from planbook.daily import list_planners, validate_date
from planbook.evening import get_active
from planbook.models import DashboardSummary
from planbook.pomodoro import get_pomodoro_stats
from planbook.workspace import workspace_root

RECENT_PLANNERS = 7


def build_dashboard(
    start_date: str | None = None,
    end_date: str | None = None,
    root: Path | None = None,
) -> DashboardSummary:
    """Totals over the last 7 daily sheets, or over start..end when both are given."""
    if root is None:
        root = workspace_root()

    planners = list_planners(root)
    if start_date and end_date:
        start, end = validate_date(start_date), validate_date(end_date)
        planners = [p for p in planners if start <= p.date <= end]
    else:
        planners = planners[:RECENT_PLANNERS]

    summary = DashboardSummary(daily_planners=planners)
    for p in planners:
        summary.total_todos += len(p.todos)
        summary.completed_todos += sum(1 for t in p.todos if t.completed)
        summary.total_waters += len(p.waters)
        summary.completed_waters += sum(1 for w in p.waters if w.completed)

    summary.evening_planner = get_active(root)

    pomodoro = get_pomodoro_stats(days=7, root=root)
    summary.pomodoro_total = pomodoro["total"]
    summary.pomodoro_completed = pomodoro["completed"]
    return summary
