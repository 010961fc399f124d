from __future__ import annotations

from fastapi import APIRouter, Path, Query

from cafeorders.application.dto.responses import OrdersResponse, TableVerificationResponse
from cafeorders.application.use_cases.table_orders import TableOrders, VerifyTable
from cafeorders.domain.common.ids import TableNumber
from cafeorders.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorders.infrastructure.db.repositories.table_repo import SqlAlchemyTableRegistry
from cafeorders.infrastructure.settings import business_timezone

router = APIRouter()


def _verify_table_use_case() -> VerifyTable:
    return VerifyTable(table_registry=SqlAlchemyTableRegistry())


def _table_orders_use_case() -> TableOrders:
    return TableOrders(
        order_repository=SqlAlchemyOrderRepository(),
        business_tz=business_timezone(),
    )


@router.get("/v1/tables/{table_number}/verify", response_model=TableVerificationResponse)
def verify_table(table_number: int = Path(ge=1)) -> TableVerificationResponse:
    return _verify_table_use_case().execute(table_number=TableNumber(table_number))


@router.get("/v1/tables/{table_number}/orders", response_model=OrdersResponse)
def table_orders(
    table_number: int = Path(ge=1),
    phone: str = Query(min_length=1),
) -> OrdersResponse:
    return _table_orders_use_case().execute(table_number=TableNumber(table_number), phone=phone)
