from __future__ import annotations

import logging
import os
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import (
    DEPLOYMENT_ENVIRONMENT,
    SERVICE_NAME,
    SERVICE_VERSION,
    Resource,
)
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from cafeorders.infrastructure.settings import app_env

DEFAULT_SERVICE_NAME = "cafe-orders"
# Probes and scrapes would otherwise dominate the trace volume.
UNTRACED_URLS = "/health/live,/health/ready,/metrics"

_OTEL_CONFIGURED = False
logger = logging.getLogger(__name__)


def _service_version() -> str:
    try:
        return version("cafeorders")
    except PackageNotFoundError:
        return "unknown"


def order_service_resource() -> Resource:
    return Resource.create(
        {
            SERVICE_NAME: os.getenv("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME),
            SERVICE_VERSION: _service_version(),
            DEPLOYMENT_ENVIRONMENT: app_env(),
        }
    )


def _span_exporter() -> OTLPSpanExporter | None:
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "").strip()
    if not endpoint or app_env() == "test":
        return None
    return OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))


def configure_otel(app: FastAPI) -> None:
    """Install the tracer provider once and instrument ``app`` for order request spans."""
    global _OTEL_CONFIGURED
    if _OTEL_CONFIGURED:
        return

    provider = TracerProvider(resource=order_service_resource())
    try:
        exporter = _span_exporter()
    except (ValueError, RuntimeError):
        logger.exception("otel_exporter_setup_failed")
        exporter = None
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    set_global_textmap(TraceContextTextMapPropagator())
    FastAPIInstrumentor.instrument_app(
        app, tracer_provider=provider, excluded_urls=UNTRACED_URLS
    )
    _OTEL_CONFIGURED = True
