from __future__ import annotations

import logging

from cafeorders.application.ports.publisher import EventPublisher
from cafeorders.infrastructure.messaging.broker import event_broker

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    """Publishes order events on a redis pub/sub channel."""

    def __init__(self, timeout_seconds: float = 1.0) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> None:
        receivers = event_broker(timeout_seconds=self._timeout_seconds).publish(
            channel, message
        )
        if not receivers:
            logger.debug("event_published_without_subscribers", extra={"channel": channel})
