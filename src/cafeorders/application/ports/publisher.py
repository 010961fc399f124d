from __future__ import annotations

from typing import Protocol


class EventPublisher(Protocol):
    """Fire-and-forget delivery of serialized order events.

    Implementations may raise on transport failure; callers decide whether
    that failure matters.
    """

    def publish(self, channel: str, message: str) -> None: ...
