from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import cafeorders.api.routes.health as health_route
from cafeorders.api.main import app


def _stub_checks(monkeypatch, *, store: bool, schema: bool, broker: bool) -> list[str]:
    called: list[str] = []

    def _check(name: str, result: bool):
        def _run(timeout_seconds: float = 1.0) -> bool:
            called.append(name)
            return result

        return _run

    monkeypatch.setattr(health_route, "ping_database", _check("orderStore", store))
    monkeypatch.setattr(health_route, "order_schema_ready", _check("orderSchema", schema))
    monkeypatch.setattr(health_route, "event_broker_reachable", _check("eventBroker", broker))
    return called


def test_live_health_endpoint() -> None:
    client = TestClient(app)
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_when_order_placement_dependencies_are_up(monkeypatch) -> None:
    _stub_checks(monkeypatch, store=True, schema=True, broker=True)

    client = TestClient(app)
    response = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "checks": {"orderStore": True, "orderSchema": True, "eventBroker": True},
    }


@pytest.mark.parametrize(
    ("store", "schema", "broker"),
    [(True, False, True), (True, True, False)],
)
def test_ready_reports_failed_checks(monkeypatch, store, schema, broker) -> None:
    _stub_checks(monkeypatch, store=store, schema=schema, broker=broker)

    client = TestClient(app)
    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["checks"] == {
        "orderStore": store,
        "orderSchema": schema,
        "eventBroker": broker,
    }


def test_schema_is_not_inspected_when_store_is_down(monkeypatch) -> None:
    called = _stub_checks(monkeypatch, store=False, schema=True, broker=True)

    client = TestClient(app)
    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["checks"]["orderSchema"] is False
    assert "orderSchema" not in called


def test_metrics_endpoint_exposes_order_counters() -> None:
    client = TestClient(app)
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "cafe_sequence_allocations_total" in response.text
