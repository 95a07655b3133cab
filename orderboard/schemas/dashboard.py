from decimal import Decimal
from typing import List

from orderboard.models.order import OrderStatus, PaymentMethod
from orderboard.schemas.customer import CamelModel


class DashboardStats(CamelModel):
    active_orders: int
    completed_orders: int
    monthly_revenue: Decimal
    active_customers: int


class MonthlyRevenuePoint(CamelModel):
    month: str
    revenue: Decimal


class StatusCount(CamelModel):
    status: OrderStatus
    count: int


class PaymentMethodSummary(CamelModel):
    payment_method: PaymentMethod
    count: int
    revenue: Decimal


class FinanceSummary(CamelModel):
    total_revenue: Decimal
    pending_payments: Decimal
    average_order_value: Decimal
    payment_methods: List[PaymentMethodSummary]
