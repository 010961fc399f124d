from __future__ import annotations

import concurrent.futures
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session

from cafeorders.domain.common.ids import OfferId
from cafeorders.infrastructure.db.models.offer import OfferModel
from cafeorders.infrastructure.db.repositories.offer_repo import SqlAlchemyOfferRepository
from cafeorders.infrastructure.db.repositories.sequence_repo import (
    SqlAlchemySequenceCounterRepository,
)
from cafeorders.infrastructure.db.session import get_engine


def _unused_day_key() -> str:
    # far-future keys never collide with real business days
    return f"9{uuid4().int % 10_000_000:07d}"


def test_sequence_increments_are_unique_under_concurrency() -> None:
    repository = SqlAlchemySequenceCounterRepository()
    key = _unused_day_key()

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        values = list(executor.map(lambda _: repository.increment(key), range(40)))

    assert sorted(values) == list(range(1, 41))


def test_offer_reservations_stop_at_usage_limit() -> None:
    offer_id = OfferId(f"off_{uuid4().hex[:12]}")
    now = datetime.now(timezone.utc)
    with Session(get_engine()) as session:
        session.add(
            OfferModel(
                id=str(offer_id),
                title="limited",
                discount_type="flat",
                discount_value=Decimal("500"),
                minimum_order_cents=0,
                currency="INR",
                valid_from=now - timedelta(hours=1),
                valid_to=now + timedelta(hours=1),
                is_active=True,
                usage_limit=3,
                used_count=0,
                applicable_categories=[],
                applicable_items=[],
            )
        )
        session.commit()

    repository = SqlAlchemyOfferRepository()
    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: repository.try_reserve(offer_id, now), range(12)))

    assert results.count(True) == 3
    offer = repository.get(offer_id)
    assert offer is not None
    assert offer.used_count == 3

    repository.release(offer_id)
    assert repository.get(offer_id).used_count == 2
    assert repository.try_reserve(offer_id, now) is True
