from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from cafeorders.application.ports.repositories import StorageUnavailableError


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


@lru_cache(maxsize=8)
def _build_engine(database_url: str, connect_timeout: int) -> Engine:
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args={"connect_timeout": connect_timeout},
    )


def get_engine(timeout_seconds: float = 1.0) -> Engine:
    connect_timeout = max(1, int(timeout_seconds))
    return _build_engine(_database_url(), connect_timeout)


def ping_database(timeout_seconds: float = 1.0) -> bool:
    try:
        with get_engine(timeout_seconds).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, RuntimeError):
        return False


# Order placement cannot proceed without these.
ORDER_TABLES = ("cafe_tables", "menu_items", "offers", "order_sequences", "orders", "order_lines")


def order_schema_ready(timeout_seconds: float = 1.0) -> bool:
    """True once migrations have created every table order placement touches."""
    try:
        inspector = inspect(get_engine(timeout_seconds))
        return all(inspector.has_table(table_name) for table_name in ORDER_TABLES)
    except (SQLAlchemyError, RuntimeError):
        return False


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
        raise StorageUnavailableError(f"storage unavailable during {operation}") from exc
