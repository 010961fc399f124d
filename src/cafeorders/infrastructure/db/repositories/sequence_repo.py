from __future__ import annotations

from sqlalchemy import Engine
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from cafeorders.application.ports.repositories import SequenceCounterRepository
from cafeorders.infrastructure.db.models.sequence import OrderSequenceModel
from cafeorders.infrastructure.db.session import get_engine, storage_errors


class SqlAlchemySequenceCounterRepository(SequenceCounterRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def increment(self, day_key: str) -> int:
        # one upsert: creates the day's row at 1 or bumps it, returning the new value
        statement = (
            insert(OrderSequenceModel)
            .values(day_key=day_key, last_value=1)
            .on_conflict_do_update(
                index_elements=[OrderSequenceModel.day_key],
                set_={"last_value": OrderSequenceModel.last_value + 1},
            )
            .returning(OrderSequenceModel.last_value)
        )
        with storage_errors("sequence increment"), Session(self._engine) as session:
            value = session.execute(statement).scalar_one()
            session.commit()
        return int(value)
