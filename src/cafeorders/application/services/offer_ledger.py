from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from cafeorders.application.metrics.order_lifecycle import (
    record_offer_application,
    record_offer_release,
)
from cafeorders.application.ports.repositories import OfferRepository
from cafeorders.domain.common.ids import OfferId
from cafeorders.domain.common.money import Money
from cafeorders.domain.offer.entities import Offer, OfferUnavailableReason
from cafeorders.domain.order.entities import OrderLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OfferApplication:
    applied: bool
    discount: Money
    offer_id: OfferId | None = None
    offer_code: str | None = None
    reason: OfferUnavailableReason | None = None


class OfferLedger:
    def __init__(self, offer_repository: OfferRepository) -> None:
        self._offer_repository = offer_repository

    def try_apply(
        self,
        offer_id: OfferId,
        subtotal: Money,
        now: datetime,
        lines: Sequence[OrderLine] = (),
    ) -> OfferApplication:
        offer = self._offer_repository.get(offer_id)
        return self._apply(offer, subtotal=subtotal, now=now, lines=lines)

    def try_apply_code(
        self,
        code: str,
        subtotal: Money,
        now: datetime,
        lines: Sequence[OrderLine] = (),
    ) -> OfferApplication:
        offer = self._offer_repository.get_by_code(code.strip().upper())
        return self._apply(offer, subtotal=subtotal, now=now, lines=lines)

    def release(self, application: OfferApplication) -> None:
        if not application.applied or application.offer_id is None:
            return
        self._offer_repository.release(application.offer_id)
        record_offer_release()
        logger.info("offer_released", extra={"offer_id": str(application.offer_id)})

    def _apply(
        self,
        offer: Offer | None,
        subtotal: Money,
        now: datetime,
        lines: Sequence[OrderLine],
    ) -> OfferApplication:
        if offer is None:
            return _rejected(subtotal, None, OfferUnavailableReason.NOT_FOUND)

        reason = offer.unavailable_reason(now=now, subtotal=subtotal)
        if reason is not None:
            return _rejected(subtotal, offer, reason)

        discount = offer.compute_discount(subtotal, lines)
        # the repository re-checks window and cap in the same statement as the increment
        if not self._offer_repository.try_reserve(offer.offer_id, now):
            return _rejected(subtotal, offer, OfferUnavailableReason.EXHAUSTED)

        record_offer_application("applied")
        logger.info(
            "offer_reserved",
            extra={"offer_id": str(offer.offer_id), "discount_cents": discount.amount_cents},
        )
        return OfferApplication(
            applied=True,
            discount=discount,
            offer_id=offer.offer_id,
            offer_code=offer.code,
        )


def _rejected(
    subtotal: Money,
    offer: Offer | None,
    reason: OfferUnavailableReason,
) -> OfferApplication:
    record_offer_application(reason.value)
    logger.info(
        "offer_not_applied",
        extra={
            "offer_id": str(offer.offer_id) if offer else None,
            "reason": reason.value,
        },
    )
    return OfferApplication(
        applied=False,
        discount=Money.zero(subtotal.currency),
        offer_id=offer.offer_id if offer else None,
        offer_code=offer.code if offer else None,
        reason=reason,
    )
