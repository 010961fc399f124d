from __future__ import annotations

import logging

from cafeorders.application.mappers.event_envelope import ORDER_EVENTS_CHANNEL
from cafeorders.application.ports.publisher import EventPublisher

logger = logging.getLogger(__name__)


def publish_order_event(publisher: EventPublisher, message: str) -> None:
    # delivery failures never fail the calling operation
    try:
        publisher.publish(channel=ORDER_EVENTS_CHANNEL, message=message)
    except Exception:
        logger.warning("order_event_publish_failed", exc_info=True)
