from __future__ import annotations

from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME

from cafeorders.infrastructure.observability import otel


def test_resource_names_the_order_service(monkeypatch) -> None:
    monkeypatch.setenv("OTEL_SERVICE_NAME", "cafe-orders-blue")
    monkeypatch.setenv("APP_ENV", "Staging")

    attributes = otel.order_service_resource().attributes

    assert attributes[SERVICE_NAME] == "cafe-orders-blue"
    assert attributes[DEPLOYMENT_ENVIRONMENT] == "staging"


def test_spans_are_not_exported_from_tests(monkeypatch) -> None:
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317")
    monkeypatch.setenv("APP_ENV", "test")

    assert otel._span_exporter() is None


def test_spans_are_not_exported_without_endpoint(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)

    assert otel._span_exporter() is None
