from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, case, delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from cafeorders.application.ports.repositories import OrderRepository, StatusConflictError
from cafeorders.domain.common.ids import MenuItemId, OfferId, OrderId, TableNumber
from cafeorders.domain.common.money import Money
from cafeorders.domain.order.entities import (
    AWAITING_PAYMENT_STATUSES,
    Customer,
    Order,
    OrderLine,
    OrderStatus,
)
from cafeorders.domain.order.stats import DailyOrderStats
from cafeorders.infrastructure.db.models.order import OrderLineModel, OrderModel
from cafeorders.infrastructure.db.session import get_engine, storage_errors


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, order: Order) -> None:
        order_model = self._to_model(order)
        with storage_errors("order insert"), Session(self._engine) as session:
            session.add(order_model)
            session.commit()

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        return self._fetch_one(statement)

    def get_by_number(self, order_number: str) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.order_number == order_number)
            .limit(1)
        )
        return self._fetch_one(statement)

    def update_status(self, order: Order, expected_status: OrderStatus) -> None:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order.order_id),
                OrderModel.status == expected_status.value,
            )
            .values(
                status=order.status.value,
                preparing_at=order.preparing_at,
                completed_at=order.completed_at,
                paid_at=order.paid_at,
                cancelled_at=order.cancelled_at,
            )
        )
        with storage_errors("order status update"), Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise StatusConflictError(
                    f"order {order.order_id} is no longer in status={expected_status.value}"
                )
            session.commit()

    def update_notes(
        self,
        order_id: OrderId,
        notes: str | None,
        editable_statuses: frozenset[OrderStatus],
    ) -> bool:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == str(order_id),
                OrderModel.status.in_([status.value for status in editable_statuses]),
            )
            .values(notes=notes)
        )
        with storage_errors("order notes update"), Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        return result.rowcount == 1

    def list_between(
        self,
        start: datetime,
        end: datetime,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(OrderModel.created_at >= start, OrderModel.created_at < end)
        )
        if status is not None:
            statement = statement.where(OrderModel.status == status.value)
        statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        return self._fetch_all(statement)

    def list_for_table(
        self,
        table_number: TableNumber,
        customer_phone: str,
        since: datetime,
        statuses: frozenset[OrderStatus],
    ) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.lines))
            .where(
                OrderModel.table_number == int(table_number),
                OrderModel.customer_phone == customer_phone,
                OrderModel.created_at >= since,
                OrderModel.status.in_([status.value for status in statuses]),
            )
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return self._fetch_all(statement)

    def summarize_between(
        self,
        start: datetime,
        end: datetime,
        currency: str,
    ) -> DailyOrderStats:
        awaiting = [status.value for status in AWAITING_PAYMENT_STATUSES]
        statement = select(
            _count_where(OrderModel.status != OrderStatus.CANCELLED.value),
            _count_where(OrderModel.status == OrderStatus.PENDING.value),
            _count_where(OrderModel.status == OrderStatus.PREPARING.value),
            _count_where(OrderModel.status == OrderStatus.COMPLETED.value),
            _count_where(OrderModel.status == OrderStatus.HISTORY.value),
            _count_where(OrderModel.status == OrderStatus.CANCELLED.value),
            func.coalesce(
                func.sum(
                    case(
                        (OrderModel.status == OrderStatus.HISTORY.value, OrderModel.total_cents),
                        else_=0,
                    )
                ),
                0,
            ),
            func.coalesce(
                func.sum(
                    case((OrderModel.status.in_(awaiting), OrderModel.total_cents), else_=0)
                ),
                0,
            ),
        ).where(OrderModel.created_at >= start, OrderModel.created_at < end)

        with storage_errors("daily stats"), Session(self._engine) as session:
            row = session.execute(statement).one()

        return DailyOrderStats(
            total_orders=int(row[0] or 0),
            pending_orders=int(row[1] or 0),
            preparing_orders=int(row[2] or 0),
            completed_orders=int(row[3] or 0),
            paid_orders=int(row[4] or 0),
            cancelled_orders=int(row[5] or 0),
            total_earnings=Money(amount_cents=int(row[6] or 0), currency=currency),
            pending_amount=Money(amount_cents=int(row[7] or 0), currency=currency),
        )

    def purge_history_before(self, cutoff: datetime) -> int:
        statement = delete(OrderModel).where(
            OrderModel.status == OrderStatus.HISTORY.value,
            OrderModel.created_at < cutoff,
        )
        with storage_errors("history purge"), Session(self._engine) as session:
            result = session.execute(statement)
            session.commit()
        return int(result.rowcount or 0)

    def _fetch_one(self, statement) -> Order | None:
        with storage_errors("order read"), Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def _fetch_all(self, statement) -> list[Order]:
        with storage_errors("order list"), Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            return [self._to_domain(model) for model in models]

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            order_number=order.order_number,
            token=order.token,
            table_number=int(order.table_number),
            customer_name=order.customer.name,
            customer_phone=order.customer.phone,
            status=order.status.value,
            subtotal_cents=order.subtotal.amount_cents,
            discount_cents=order.discount.amount_cents,
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
            offer_id=str(order.offer_id) if order.offer_id else None,
            offer_code=order.offer_code,
            notes=order.notes,
            created_at=order.created_at,
            preparing_at=order.preparing_at,
            completed_at=order.completed_at,
            paid_at=order.paid_at,
            cancelled_at=order.cancelled_at,
        )
        order_model.lines = [
            OrderLineModel(
                position=position,
                menu_item_id=str(line.item_id),
                name=line.name,
                category=line.category,
                quantity=line.quantity,
                unit_price_cents=line.unit_price.amount_cents,
                currency=line.unit_price.currency,
                special_instructions=line.special_instructions,
            )
            for position, line in enumerate(order.lines)
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        lines = [
            OrderLine(
                item_id=MenuItemId(line.menu_item_id),
                name=line.name,
                category=line.category,
                quantity=line.quantity,
                unit_price=Money(amount_cents=line.unit_price_cents, currency=line.currency),
                special_instructions=line.special_instructions,
            )
            for line in model.lines
        ]
        return Order(
            order_id=OrderId(model.id),
            order_number=model.order_number,
            token=model.token,
            table_number=TableNumber(model.table_number),
            customer=Customer(name=model.customer_name, phone=model.customer_phone),
            status=OrderStatus(model.status),
            lines=lines,
            subtotal=Money(amount_cents=model.subtotal_cents, currency=model.currency),
            discount=Money(amount_cents=model.discount_cents, currency=model.currency),
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            created_at=_aware(model.created_at),
            offer_id=OfferId(model.offer_id) if model.offer_id else None,
            offer_code=model.offer_code,
            notes=model.notes,
            preparing_at=_aware(model.preparing_at),
            completed_at=_aware(model.completed_at),
            paid_at=_aware(model.paid_at),
            cancelled_at=_aware(model.cancelled_at),
        )


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
