from __future__ import annotations

import logging
import os
from functools import lru_cache

import redis

logger = logging.getLogger(__name__)


def _broker_url() -> str:
    url = os.getenv("REDIS_URL")
    if not url:
        raise RuntimeError("REDIS_URL is not set; order events have nowhere to go")
    return url


@lru_cache(maxsize=8)
def _connect(broker_url: str, timeout_seconds: float) -> redis.Redis:
    return redis.Redis.from_url(
        broker_url,
        socket_connect_timeout=timeout_seconds,
        socket_timeout=timeout_seconds,
        decode_responses=True,
    )


def event_broker(timeout_seconds: float = 1.0) -> redis.Redis:
    """Redis connection used for order event pub/sub."""
    return _connect(_broker_url(), timeout_seconds)


def reset_event_broker() -> None:
    _connect.cache_clear()


def event_broker_reachable(timeout_seconds: float = 1.0) -> bool:
    try:
        return bool(event_broker(timeout_seconds).ping())
    except (redis.RedisError, RuntimeError) as exc:
        logger.warning("event_broker_unreachable", extra={"reason": type(exc).__name__})
        return False
