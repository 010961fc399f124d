from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cafeorders.infrastructure.db.models.menu import Base


class OrderSequenceModel(Base):
    __tablename__ = "order_sequences"

    day_key: Mapped[str] = mapped_column(String(8), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False)
