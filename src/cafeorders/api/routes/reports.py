from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Query

from cafeorders.application.dto.responses import DailyStatsResponse, HistoryForDayResponse
from cafeorders.application.services.business_day import business_day
from cafeorders.application.use_cases.daily_reports import (
    GetDailyStats,
    GetHistoryForDay,
    parse_report_date,
)
from cafeorders.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from cafeorders.infrastructure.settings import business_timezone, currency

router = APIRouter()


def _daily_stats_use_case() -> GetDailyStats:
    return GetDailyStats(
        order_repository=SqlAlchemyOrderRepository(),
        currency=currency(),
        business_tz=business_timezone(),
    )


def _history_use_case() -> GetHistoryForDay:
    return GetHistoryForDay(
        order_repository=SqlAlchemyOrderRepository(),
        currency=currency(),
        business_tz=business_timezone(),
    )


def report_day(raw: str | None) -> date:
    if raw is None:
        return business_day(datetime.now(timezone.utc), business_timezone())
    return parse_report_date(raw)


@router.get("/v1/reports/daily", response_model=DailyStatsResponse)
def daily_stats(day: str | None = Query(default=None, alias="date")) -> DailyStatsResponse:
    return _daily_stats_use_case().execute(day=report_day(day))


@router.get("/v1/reports/history", response_model=HistoryForDayResponse)
def history_for_day(day: str | None = Query(default=None, alias="date")) -> HistoryForDayResponse:
    return _history_use_case().execute(day=report_day(day))
