from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from cafeorders.application.metrics.order_lifecycle import record_history_purged
from cafeorders.application.ports.repositories import OrderRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PurgeHistory:
    def __init__(
        self,
        order_repository: OrderRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._order_repository = order_repository
        self._clock = clock

    def execute(self, retention_days: int) -> int:
        if retention_days < 1:
            raise ValueError("retention_days must be >= 1")
        cutoff = self._clock() - timedelta(days=retention_days)
        deleted = self._order_repository.purge_history_before(cutoff)
        record_history_purged(deleted)
        logger.info(
            "history_purged",
            extra={"deleted": deleted, "cutoff": cutoff.isoformat()},
        )
        return deleted
