from __future__ import annotations

from sqlalchemy import Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from cafeorders.infrastructure.db.models.menu import Base


class TableModel(Base):
    __tablename__ = "cafe_tables"

    table_number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
