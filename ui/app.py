from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import HTMLResponse

from planbook import (
    DAY_LABELS,
    DAYS,
    HOURS,
    Grid,
    NotFoundError,
    ValidationError,
    load_settings,
    setup_logging,
    workspace_root,
)
from planbook import daily, evening, pomodoro
from planbook.dashboard import build_dashboard

logger = logging.getLogger("planbook.web")

app = FastAPI(title="Planbook", version="0.4.0")


# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def render_grid(grid: Grid) -> str:
    """Read-only HTML table of the evening grid."""
    head = "".join(f"<th>{DAY_LABELS[d]}</th>" for d in DAYS)
    rows = []
    for hour in HOURS:
        cells = "".join(
            f'<td data-cell-key="{hour}-{day}">{_escape(grid.get(hour, day))}</td>'
            for day in DAYS
        )
        rows.append(f'<tr><th class="time">{hour:02d}:00</th>{cells}</tr>')
    return f'<table class="evening"><thead><tr><th></th>{head}</tr></thead><tbody>{"".join(rows)}</tbody></table>'


# ── Pages ─────────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    planner = evening.get_active()
    grid = Grid.from_activities(planner.activities) if planner else Grid()
    saved = _escape(planner.created_at) if planner else "(never saved)"
    history_rows = "".join(
        f"<li>#{h.id} &middot; {_escape(h.created_at)}</li>" for h in evening.list_history(limit=10)
    )

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Planbook</title>
  <style>
    body {{ font-family: system-ui, sans-serif; margin: 24px; }}
    table.evening {{ border-collapse: collapse; }}
    table.evening td, table.evening th {{ border: 1px solid #ccc; padding: 6px 10px; min-width: 90px; }}
    th.time {{ text-align: right; color: #666; }}
    .muted {{ color: #888; font-size: 13px; }}
  </style>
</head>
<body>
  <h1>Evening Planner</h1>
  <div class="muted">Last saved: {saved} &middot; <code>{_escape(str(workspace_root()))}</code></div>
  {render_grid(grid)}
  <h2>History</h2>
  <ol class="muted">{history_rows or "<li>(no history yet)</li>"}</ol>
</body>
</html>"""
    return HTMLResponse(html)


# ── Evening planner ───────────────────────────────────────────

@app.get("/api/evening")
def api_get_evening() -> dict[str, Any] | None:
    """Active evening grid, or null when nothing was saved yet."""
    planner = evening.get_active()
    return planner.to_dict() if planner else None


@app.post("/api/evening")
def api_save_evening(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    """Replace the active grid and append a history snapshot."""
    try:
        activities = evening.parse_payload(payload)
        planner = evening.save_activities(activities)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "id": planner.id}


@app.get("/api/evening/history")
def api_evening_history() -> list[dict[str, Any]]:
    limit = load_settings().history_limit
    return [h.to_dict() for h in evening.list_history(limit=limit)]


@app.get("/api/evening/history/{history_id}")
def api_evening_history_item(history_id: int) -> dict[str, Any]:
    try:
        return evening.get_history(history_id).to_dict()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ── Daily planner ─────────────────────────────────────────────

@app.get("/api/daily")
def api_list_daily() -> list[dict[str, Any]]:
    return [p.to_dict(with_sections=False) for p in daily.list_planners()]


@app.get("/api/daily/{date}")
def api_get_daily(date: str) -> dict[str, Any] | None:
    try:
        planner = daily.get_planner(date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return planner.to_dict() if planner else None


@app.post("/api/daily")
def api_save_daily(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    try:
        planner = daily.save_planner(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "id": planner.id}


@app.delete("/api/daily/{date}")
def api_delete_daily(date: str) -> dict[str, Any]:
    try:
        daily.delete_planner(date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True}


# ── Pomodoro ──────────────────────────────────────────────────

@app.get("/api/pomodoro")
def api_list_pomodoro() -> list[dict[str, Any]]:
    return [s.to_dict() for s in pomodoro.list_sessions()]


@app.post("/api/pomodoro")
def api_start_pomodoro(payload: dict[str, Any] = Body(default={})) -> dict[str, Any]:
    try:
        session = pomodoro.start_session(
            task_name=str(payload.get("task_name") or ""),
            duration_minutes=payload.get("duration_minutes"),
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.to_dict()


@app.put("/api/pomodoro/{session_id}/complete")
def api_complete_pomodoro(session_id: int) -> dict[str, Any]:
    try:
        return pomodoro.complete_session(session_id).to_dict()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/api/pomodoro/{session_id}")
def api_delete_pomodoro(session_id: int) -> dict[str, Any]:
    pomodoro.delete_session(session_id)
    return {"success": True}


# ── Dashboard ─────────────────────────────────────────────────

@app.get("/api/dashboard")
def api_dashboard(startDate: str | None = None, endDate: str | None = None) -> dict[str, Any]:
    try:
        return build_dashboard(start_date=startDate, end_date=endDate).to_dict()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ── Entry point ───────────────────────────────────────────────

def main() -> None:
    import uvicorn

    settings = load_settings()
    setup_logging("web", settings.log_level)
    host = os.environ.get("PLANBOOK_HOST", "127.0.0.1")
    port = int(os.environ.get("PLANBOOK_PORT", "8000"))
    logger.info("serving %s on http://%s:%d", workspace_root(), host, port)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
