from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from cafeorders.infrastructure.db.models.menu import Base


class OfferModel(Base):
    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint("used_count >= 0", name="ck_offers_used_count_non_negative"),
        CheckConstraint(
            "usage_limit IS NULL OR used_count <= usage_limit",
            name="ck_offers_used_count_within_limit",
        ),
    )

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    minimum_order_cents: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    max_discount_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    code: Mapped[str | None] = mapped_column(String(50), nullable=True, unique=True)
    valid_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    valid_to: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    applicable_categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    applicable_items: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
