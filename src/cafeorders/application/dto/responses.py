from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class OrderLineResponse(BaseModel):
    menuItemId: str
    name: str
    category: str | None = None
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse
    specialInstructions: str | None = None


class OrderResponse(BaseModel):
    orderId: str
    orderNumber: str
    token: int
    tableNumber: int
    customerName: str
    customerPhone: str
    status: str
    items: list[OrderLineResponse] = Field(default_factory=list)
    itemCount: int
    subtotal: MoneyResponse
    discount: MoneyResponse
    total: MoneyResponse
    offerId: str | None = None
    offerCode: str | None = None
    notes: str | None = None
    createdAt: datetime
    preparingAt: datetime | None = None
    completedAt: datetime | None = None
    paidAt: datetime | None = None
    cancelledAt: datetime | None = None


class OrdersResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class DailyStatsResponse(BaseModel):
    date: date
    totalOrders: int
    pendingOrders: int
    preparingOrders: int
    completedOrders: int
    paidOrders: int
    cancelledOrders: int
    totalEarnings: MoneyResponse
    pendingAmount: MoneyResponse


class HistoryForDayResponse(BaseModel):
    date: date
    orders: list[OrderResponse] = Field(default_factory=list)
    totalOrders: int
    totalEarnings: MoneyResponse


class TableVerificationResponse(BaseModel):
    tableNumber: int
    isActive: bool
