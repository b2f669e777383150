"""Tests for ui/app.py — REST endpoints and the read-only index page."""


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": "true"}


def test_evening_empty(client):
    r = client.get("/api/evening")
    assert r.status_code == 200
    assert r.json() is None


def test_evening_save_and_load(client):
    payload = {"activities": [
        {"time_hour": 19, "day_of_week": 3, "activity_text": "Gym"},
        {"time_hour": 18, "day_of_week": 2, "activity_text": "Gym"},
    ]}
    r = client.post("/api/evening", json=payload)
    assert r.status_code == 200
    assert r.json() == {"success": True, "id": 1}

    data = client.get("/api/evening").json()
    assert data["id"] == 1
    assert data["is_active"] is True
    assert [(a["time_hour"], a["day_of_week"]) for a in data["activities"]] == [(18, 2), (19, 3)]


def test_evening_save_rejects_bad_cell(client):
    r = client.post("/api/evening", json={"activities": [{"time_hour": 30, "day_of_week": 1, "activity_text": "x"}]})
    assert r.status_code == 400
    assert client.get("/api/evening").json() is None


def test_evening_history(client):
    client.post("/api/evening", json={"activities": [{"time_hour": 18, "day_of_week": 1, "activity_text": "Read"}]})
    client.post("/api/evening", json={"activities": []})

    rows = client.get("/api/evening/history").json()
    assert [row["id"] for row in rows] == [2, 1]
    assert set(rows[0]) == {"id", "evening_planner_id", "created_at", "planner_created_at"}

    snap = client.get("/api/evening/history/1").json()
    assert isinstance(snap["snapshot_data"], str)
    assert "Read" in snap["snapshot_data"]


def test_evening_history_not_found(client):
    r = client.get("/api/evening/history/42")
    assert r.status_code == 404
    assert r.json()["detail"] == "History not found"


def test_daily_crud(client):
    r = client.post("/api/daily", json={
        "date": "2026-03-02",
        "goal": "Ship the release",
        "todos": [{"priority": 1, "task_text": "Tag", "completed": True}],
        "waters": [{"cup_number": 1, "completed": True}, {"cup_number": 2}],
    })
    assert r.status_code == 200
    assert r.json()["success"] is True

    sheet = client.get("/api/daily/2026-03-02").json()
    assert sheet["goal"] == "Ship the release"
    assert sheet["todos"][0]["task_text"] == "Tag"

    listing = client.get("/api/daily").json()
    assert [p["date"] for p in listing] == ["2026-03-02"]
    assert "todos" not in listing[0]

    assert client.delete("/api/daily/2026-03-02").json() == {"success": True}
    assert client.get("/api/daily/2026-03-02").json() is None


def test_daily_bad_date(client):
    assert client.get("/api/daily/not-a-date").status_code == 400
    assert client.post("/api/daily", json={"goal": "x"}).status_code == 400


def test_pomodoro_flow(client):
    session = client.post("/api/pomodoro", json={"task_name": "Write"}).json()
    assert session["duration_minutes"] == 25
    assert session["completed"] is False

    done = client.put(f"/api/pomodoro/{session['id']}/complete").json()
    assert done["completed"] is True
    assert done["completed_at"]

    assert len(client.get("/api/pomodoro").json()) == 1
    assert client.delete(f"/api/pomodoro/{session['id']}").json() == {"success": True}
    assert client.get("/api/pomodoro").json() == []


def test_pomodoro_errors(client):
    assert client.put("/api/pomodoro/99/complete").status_code == 404
    assert client.post("/api/pomodoro", json={"duration_minutes": -5}).status_code == 400


def test_dashboard(client):
    client.post("/api/daily", json={"date": "2026-03-02", "todos": [{"priority": 1, "completed": True}, {"priority": 2}]})
    client.post("/api/evening", json={"activities": [{"time_hour": 18, "day_of_week": 1, "activity_text": "Read"}]})
    client.post("/api/pomodoro", json={})

    data = client.get("/api/dashboard").json()
    assert data["stats"]["total_todos"] == 2
    assert data["stats"]["completed_todos"] == 1
    assert data["evening_planner"]["id"] == 1
    assert "activities" not in data["evening_planner"]
    assert data["stats"]["pomodoro"] == {"total": 1, "completed": 0}


def test_dashboard_date_range(client):
    for day in ("2026-03-01", "2026-03-02", "2026-03-05"):
        client.post("/api/daily", json={"date": day})
    data = client.get("/api/dashboard", params={"startDate": "2026-03-01", "endDate": "2026-03-02"}).json()
    assert [p["date"] for p in data["daily_planners"]] == ["2026-03-02", "2026-03-01"]


def test_index_renders_grid(client):
    client.post("/api/evening", json={"activities": [{"time_hour": 18, "day_of_week": 2, "activity_text": "<Gym>"}]})
    r = client.get("/")
    assert r.status_code == 200
    assert "Evening Planner" in r.text
    assert 'data-cell-key="18-2">&lt;Gym&gt;</td>' in r.text
