from __future__ import annotations

import re
from contextvars import ContextVar
from uuid import uuid4

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from cafeorders.application.mappers.event_envelope import TraceContext

REQUEST_ID_HEADER = "X-Request-Id"
# Client ids end up in logs and published events.
_ACCEPTED_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

_request_id: ContextVar[str | None] = ContextVar("cafeorders_request_id", default=None)


def get_request_id() -> str | None:
    return _request_id.get()


def current_trace_id() -> str | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def current_trace_context() -> TraceContext:
    """Ids of the request being served, for stamping on order events."""
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())


def _request_id_for(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER)
    if supplied and _ACCEPTED_REQUEST_ID.match(supplied):
        return supplied
    return uuid4().hex


class CorrelationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = _request_id_for(request)
        token = _request_id.set(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            _request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
