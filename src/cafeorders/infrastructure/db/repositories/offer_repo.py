from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, func, or_, select, update
from sqlalchemy.orm import Session

from cafeorders.application.ports.repositories import OfferRepository
from cafeorders.domain.common.ids import MenuItemId, OfferId
from cafeorders.domain.common.money import Money
from cafeorders.domain.offer.entities import DiscountType, Offer
from cafeorders.infrastructure.db.models.offer import OfferModel
from cafeorders.infrastructure.db.session import get_engine, storage_errors


class SqlAlchemyOfferRepository(OfferRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self, offer_id: OfferId) -> Offer | None:
        statement = select(OfferModel).where(OfferModel.id == str(offer_id))
        return self._fetch_one(statement)

    def get_by_code(self, code: str) -> Offer | None:
        statement = select(OfferModel).where(func.upper(OfferModel.code) == code.upper()).limit(1)
        return self._fetch_one(statement)

    def try_reserve(self, offer_id: OfferId, now: datetime) -> bool:
        # compare-and-increment: the usability check and the increment are one statement
        statement = (
            update(OfferModel)
            .where(
                OfferModel.id == str(offer_id),
                OfferModel.is_active.is_(True),
                OfferModel.valid_from <= now,
                OfferModel.valid_to >= now,
                or_(
                    OfferModel.usage_limit.is_(None),
                    OfferModel.used_count < OfferModel.usage_limit,
                ),
            )
            .values(used_count=OfferModel.used_count + 1)
        )
        with storage_errors("offer reservation"), Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        return result.rowcount == 1

    def release(self, offer_id: OfferId) -> None:
        statement = (
            update(OfferModel)
            .where(OfferModel.id == str(offer_id), OfferModel.used_count > 0)
            .values(used_count=OfferModel.used_count - 1)
        )
        with storage_errors("offer release"), Session(self._engine) as session:
            session.execute(statement)
            session.commit()

    def _fetch_one(self, statement) -> Offer | None:
        with storage_errors("offer read"), Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def _to_domain(self, model: OfferModel) -> Offer:
        return Offer(
            offer_id=OfferId(model.id),
            title=model.title,
            discount_type=DiscountType(model.discount_type),
            discount_value=model.discount_value,
            minimum_order=Money(amount_cents=model.minimum_order_cents, currency=model.currency),
            max_discount=(
                Money(amount_cents=model.max_discount_cents, currency=model.currency)
                if model.max_discount_cents is not None
                else None
            ),
            code=model.code.upper() if model.code else None,
            valid_from=_aware(model.valid_from),
            valid_to=_aware(model.valid_to),
            is_active=model.is_active,
            usage_limit=model.usage_limit,
            used_count=model.used_count,
            applicable_categories=tuple(model.applicable_categories or ()),
            applicable_items=tuple(MenuItemId(item) for item in model.applicable_items or ()),
        )


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
