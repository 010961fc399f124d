from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from cafeorders.application.ports.repositories import TableRegistry
from cafeorders.domain.common.ids import TableNumber
from cafeorders.infrastructure.db.models.table import TableModel
from cafeorders.infrastructure.db.session import get_engine, storage_errors


class SqlAlchemyTableRegistry(TableRegistry):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def is_table_active(self, table_number: TableNumber) -> bool:
        statement = (
            select(TableModel.is_active)
            .where(TableModel.table_number == int(table_number))
            .limit(1)
        )
        with storage_errors("table lookup"), Session(self._engine) as session:
            value = session.execute(statement).scalar_one_or_none()
        return bool(value)
