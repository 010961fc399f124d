from __future__ import annotations

import argparse
import sys
from typing import Sequence

from cafeorders.application.use_cases.purge_history import PurgeHistory
from cafeorders.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorders.infrastructure.observability.logging_config import configure_logging
from cafeorders.infrastructure.settings import history_retention_days


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Delete archived (history) orders older than the retention window."
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Retention window in days. Defaults to ORDER_HISTORY_RETENTION_DAYS (30).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging()
    retention_days = args.days if args.days is not None else history_retention_days()
    if retention_days < 1:
        print("--days must be >= 1")
        return 2

    deleted = PurgeHistory(order_repository=SqlAlchemyOrderRepository()).execute(retention_days)
    print(f"purged {deleted} history orders older than {retention_days} days")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
