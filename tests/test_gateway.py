"""Tests for planbook/gateway.py — REST client and error translation."""

import threading

import httpx
import pytest

from planbook.config import Settings
from planbook.errors import NetworkError, NotFoundError, SaveInProgressError, ServerError
from planbook.gateway import PlannerGateway
from planbook.models import Activity


def mock_gateway(handler) -> PlannerGateway:
    client = httpx.Client(base_url="http://planner.test", transport=httpx.MockTransport(handler))
    return PlannerGateway(client=client)


def test_load_active_none(gateway):
    assert gateway.load_active() is None


def test_save_then_load(gateway):
    planner_id = gateway.save([Activity(18, 2, "Gym"), Activity(19, 2, "Gym")])
    assert planner_id == 1
    planner = gateway.load_active()
    assert planner.id == 1
    assert [a.activity_text for a in planner.activities] == ["Gym", "Gym"]


def test_history_round_trip(gateway):
    gateway.save([Activity(18, 1, "Read")])
    entries = gateway.list_history()
    assert len(entries) == 1
    snapshot = gateway.get_history(entries[0].id)
    assert snapshot.activities == (Activity(18, 1, "Read"),)


def test_missing_history_is_not_found(gateway):
    with pytest.raises(NotFoundError, match="History not found"):
        gateway.get_history(7)


def test_validation_error_becomes_server_error(gateway):
    with pytest.raises(ServerError) as exc:
        gateway.save([Activity(12, 1, "Lunch")])
    assert exc.value.status_code == 400


def test_transport_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gw = mock_gateway(handler)
    with pytest.raises(NetworkError):
        gw.load_active()
    with pytest.raises(NetworkError):
        gw.save([])
    # the save slot is released after a failure
    assert not gw.saving


def test_server_error_carries_status():
    gw = mock_gateway(lambda request: httpx.Response(500, json={"error": "database unavailable"}))
    with pytest.raises(ServerError, match="database unavailable") as exc:
        gw.list_history()
    assert exc.value.status_code == 500


def test_malformed_json_is_server_error():
    gw = mock_gateway(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(ServerError, match="Malformed"):
        gw.load_active()


def test_unacknowledged_save_is_server_error():
    gw = mock_gateway(lambda request: httpx.Response(200, json={"success": False}))
    with pytest.raises(ServerError, match="not acknowledged"):
        gw.save([Activity(18, 1, "Read")])


def test_save_sends_full_grid():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "id": 5})

    gw = mock_gateway(handler)
    assert gw.save([Activity(18, 1, "Read")]) == 5
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/evening"
    assert b'"activity_text":"Read"' in seen[0].content.replace(b" ", b"")


def test_second_save_while_pending_is_rejected():
    entered = threading.Event()
    release = threading.Event()

    def handler(request):
        entered.set()
        release.wait(timeout=5)
        return httpx.Response(200, json={"success": True, "id": 1})

    gw = mock_gateway(handler)
    results = []
    worker = threading.Thread(target=lambda: results.append(gw.save([])))
    worker.start()
    try:
        assert entered.wait(timeout=5)
        assert gw.saving
        with pytest.raises(SaveInProgressError):
            gw.save([Activity(18, 1, "Read")])
    finally:
        release.set()
        worker.join(timeout=5)
    assert results == [1]
    assert not gw.saving


def test_from_settings_owns_client():
    gw = PlannerGateway.from_settings(Settings(server_url="http://planner.test", request_timeout_s=2))
    assert str(gw.client.base_url).startswith("http://planner.test")
    with gw:
        pass
    assert gw.client.is_closed
