from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from cafeorders.application.metrics.order_lifecycle import record_sequence_allocation
from cafeorders.application.ports.repositories import (
    SequenceCounterRepository,
    StorageUnavailableError,
)
from cafeorders.domain.order.numbering import day_key, format_order_number

logger = logging.getLogger(__name__)


class AllocatorUnavailableError(Exception):
    pass


@dataclass(frozen=True)
class AllocatedNumber:
    sequence: int
    order_number: str


class SequenceAllocator:
    """Hands out day-scoped order numbers.

    Each call performs one atomic increment-and-read on the day's counter
    row, so concurrent callers never observe the same value. A number that
    is allocated but never used leaves a gap; numbers are never reused.
    """

    def __init__(self, counter_repository: SequenceCounterRepository) -> None:
        self._counter_repository = counter_repository

    def next_number(self, day: date) -> AllocatedNumber:
        key = day_key(day)
        try:
            sequence = self._counter_repository.increment(key)
        except StorageUnavailableError as exc:
            logger.error("sequence_allocation_failed", extra={"day": key})
            raise AllocatorUnavailableError(
                f"could not allocate order number for day={key}"
            ) from exc

        record_sequence_allocation()
        return AllocatedNumber(sequence=sequence, order_number=format_order_number(day, sequence))
