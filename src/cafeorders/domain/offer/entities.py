from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from cafeorders.domain.common.ids import MenuItemId, OfferId
from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import OrderLine


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"
    BOGO = "bogo"


class OfferUnavailableReason(str, Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    NOT_STARTED = "not_started"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    BELOW_MINIMUM = "below_minimum"


@dataclass(frozen=True)
class Offer:
    """A promotional rule.

    ``discount_value`` is a percentage for ``percentage`` offers and an
    amount in minor units for ``flat`` offers; ``bogo`` offers ignore it and
    give one unit free for every two of an applicable item.
    """

    offer_id: OfferId
    title: str
    discount_type: DiscountType
    discount_value: Decimal
    minimum_order: Money
    max_discount: Money | None
    code: str | None
    valid_from: datetime
    valid_to: datetime
    is_active: bool
    usage_limit: int | None
    used_count: int
    applicable_categories: tuple[str, ...] = ()
    applicable_items: tuple[MenuItemId, ...] = ()

    def __post_init__(self) -> None:
        if self.discount_value < 0:
            raise ValueError("discount_value must be >= 0")
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("percentage discount_value must be <= 100")
        if self.valid_to < self.valid_from:
            raise ValueError("valid_to must not be before valid_from")
        if self.used_count < 0:
            raise ValueError("used_count must be >= 0")
        if self.usage_limit is not None and self.usage_limit < 0:
            raise ValueError("usage_limit must be >= 0")

    @property
    def has_remaining_uses(self) -> bool:
        return self.usage_limit is None or self.used_count < self.usage_limit

    def unavailable_reason(self, now: datetime, subtotal: Money) -> OfferUnavailableReason | None:
        self._check_currency(subtotal)
        if not self.is_active:
            return OfferUnavailableReason.INACTIVE
        if now < self.valid_from:
            return OfferUnavailableReason.NOT_STARTED
        if now > self.valid_to:
            return OfferUnavailableReason.EXPIRED
        if not self.has_remaining_uses:
            return OfferUnavailableReason.EXHAUSTED
        if subtotal.amount_cents < self.minimum_order.amount_cents:
            return OfferUnavailableReason.BELOW_MINIMUM
        return None

    def compute_discount(self, subtotal: Money, lines: Sequence[OrderLine] = ()) -> Money:
        self._check_currency(subtotal)
        if self.discount_type == DiscountType.PERCENTAGE:
            raw = (Decimal(subtotal.amount_cents) * self.discount_value / 100).quantize(
                Decimal(1), rounding=ROUND_HALF_UP
            )
            amount = int(raw)
        elif self.discount_type == DiscountType.FLAT:
            amount = int(self.discount_value)
        else:
            amount = sum(
                (line.quantity // 2) * line.unit_price.amount_cents
                for line in lines
                if self._applies_to(line)
            )

        if self.max_discount is not None:
            amount = min(amount, self.max_discount.amount_cents)
        amount = min(amount, subtotal.amount_cents)
        return Money(amount_cents=max(amount, 0), currency=subtotal.currency)

    def _check_currency(self, subtotal: Money) -> None:
        offer_amounts = [self.minimum_order]
        if self.max_discount is not None:
            offer_amounts.append(self.max_discount)
        for money in offer_amounts:
            if money.currency != subtotal.currency:
                raise ValueError("offer amounts and order subtotal must share one currency")

    def _applies_to(self, line: OrderLine) -> bool:
        if not self.applicable_items and not self.applicable_categories:
            return True
        if line.item_id in self.applicable_items:
            return True
        return line.category is not None and line.category in self.applicable_categories
