from __future__ import annotations

from datetime import timedelta

import pytest

from cafeorders.application.use_cases.purge_history import PurgeHistory


def test_purge_deletes_only_old_history(make_order, order_repository, now) -> None:
    old_paid = make_order(created_at=now - timedelta(days=40))
    old_paid = old_paid.mark_completed(now - timedelta(days=40)).mark_paid(now - timedelta(days=40))
    recent_paid = make_order().mark_completed(now).mark_paid(now)
    old_cancelled = make_order(created_at=now - timedelta(days=40)).cancel(now - timedelta(days=40))
    for order in (old_paid, recent_paid, old_cancelled):
        order_repository.add(order)

    deleted = PurgeHistory(order_repository, clock=lambda: now).execute(retention_days=30)

    assert deleted == 1
    assert order_repository.get(old_paid.order_id) is None
    assert order_repository.get(recent_paid.order_id) is not None
    assert order_repository.get(old_cancelled.order_id) is not None


def test_purge_requires_positive_retention(order_repository) -> None:
    with pytest.raises(ValueError):
        PurgeHistory(order_repository).execute(retention_days=0)
