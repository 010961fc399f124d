from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, Response, status

from cafeorders.infrastructure.db.session import order_schema_ready, ping_database
from cafeorders.infrastructure.messaging.broker import event_broker_reachable

router = APIRouter()

READINESS_TIMEOUT_SECONDS = 1.0


def _readiness_checks() -> dict[str, Callable[[float], bool]]:
    # Everything PlaceOrder needs: the store, the migrated schema and the event broker.
    return {
        "orderStore": ping_database,
        "orderSchema": order_schema_ready,
        "eventBroker": event_broker_reachable,
    }


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response) -> dict[str, object]:
    checks: dict[str, bool] = {}
    for name, check in _readiness_checks().items():
        # The schema cannot be inspected without the store.
        if name == "orderSchema" and not checks["orderStore"]:
            checks[name] = False
            continue
        checks[name] = check(READINESS_TIMEOUT_SECONDS)

    if all(checks.values()):
        return {"status": "ok", "checks": checks}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unavailable", "checks": checks}
