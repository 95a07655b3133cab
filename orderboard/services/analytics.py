from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List

from dateutil.relativedelta import relativedelta
from sqlalchemy import func, literal_column
from sqlalchemy.orm import Session

from orderboard.models.order import ACTIVE_STATUSES, Order, OrderStatus, PaymentMethod
from orderboard.schemas.order import quantize_money

ACTIVE_CUSTOMER_WINDOW_MONTHS = 3
REVENUE_WINDOW_MONTHS = 6

ZERO = Decimal("0.00")


def start_of_month(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _money_sum(column) -> Any:
    return func.coalesce(func.sum(column), 0)


class AnalyticsAggregator:
    """Dashboard figures computed with SQL aggregates over the orders table.

    "now" comes from ``now`` (server local time by default) so the calendar
    windows can be pinned in tests.
    """

    def __init__(self, db: Session, now: Callable[[], datetime] = datetime.now):
        self.db = db
        self.now = now

    def _month_key(self) -> Any:
        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            return func.strftime(literal_column("'%Y-%m'"), Order.created_at)
        if dialect in {"mysql", "mariadb"}:
            return func.date_format(Order.created_at, literal_column("'%Y-%m'"))
        return func.to_char(Order.created_at, literal_column("'YYYY-MM'"))

    def get_stats(self) -> Dict[str, Any]:
        now = self.now()

        active_orders = (
            self.db.query(func.count(Order.id)).filter(Order.status.in_(ACTIVE_STATUSES)).scalar() or 0
        )
        completed_orders = (
            self.db.query(func.count(Order.id)).filter(Order.status == OrderStatus.COMPLETED).scalar() or 0
        )
        monthly_revenue = (
            self.db.query(_money_sum(Order.paid_amount))
            .filter(Order.created_at >= start_of_month(now))
            .scalar()
        )
        active_customers = (
            self.db.query(func.count(func.distinct(Order.customer_id)))
            .filter(Order.created_at >= now - relativedelta(months=ACTIVE_CUSTOMER_WINDOW_MONTHS))
            .scalar()
            or 0
        )

        return {
            "active_orders": int(active_orders),
            "completed_orders": int(completed_orders),
            "monthly_revenue": quantize_money(Decimal(str(monthly_revenue or 0))),
            "active_customers": int(active_customers),
        }

    def get_monthly_revenue(self) -> List[Dict[str, Any]]:
        since = self.now() - relativedelta(months=REVENUE_WINDOW_MONTHS)
        month = self._month_key().label("month")

        rows = (
            self.db.query(month, _money_sum(Order.paid_amount).label("revenue"))
            .filter(Order.created_at >= since)
            .group_by(month)
            .order_by(month.asc())
            .all()
        )
        # meses sin pedidos no aparecen
        return [
            {"month": row.month, "revenue": quantize_money(Decimal(str(row.revenue or 0)))}
            for row in rows
        ]

    def get_status_distribution(self) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(Order.status.label("status"), func.count(Order.id).label("count"))
            .group_by(Order.status)
            .all()
        )
        counts = {OrderStatus(row.status): int(row.count) for row in rows}
        return [{"status": status, "count": counts[status]} for status in OrderStatus if counts.get(status)]

    def get_customer_stats(self, customer_id: str) -> Dict[str, Any]:
        row = (
            self.db.query(
                func.count(Order.id).label("total_orders"),
                _money_sum(Order.price).label("total_spent"),
                func.max(Order.created_at).label("last_order_date"),
            )
            .filter(Order.customer_id == customer_id)
            .one()
        )
        return {
            "total_orders": int(row.total_orders or 0),
            "total_spent": quantize_money(Decimal(str(row.total_spent or 0))),
            "last_order_date": row.last_order_date,
        }

    def get_finance_summary(self) -> Dict[str, Any]:
        total_revenue = self.db.query(_money_sum(Order.paid_amount)).scalar()
        pending_payments = (
            self.db.query(_money_sum(Order.price - Order.paid_amount))
            .filter(Order.paid_amount < Order.price)
            .scalar()
        )
        completed_count, completed_total = (
            self.db.query(func.count(Order.id), _money_sum(Order.price))
            .filter(Order.status == OrderStatus.COMPLETED)
            .one()
        )
        average_order_value = ZERO
        if completed_count:
            average_order_value = quantize_money(Decimal(str(completed_total)) / int(completed_count))

        method_rows = (
            self.db.query(
                Order.payment_method.label("payment_method"),
                func.count(Order.id).label("count"),
                _money_sum(Order.paid_amount).label("revenue"),
            )
            .group_by(Order.payment_method)
            .all()
        )
        by_method = {PaymentMethod(row.payment_method): row for row in method_rows}
        payment_methods = [
            {
                "payment_method": method,
                "count": int(by_method[method].count),
                "revenue": quantize_money(Decimal(str(by_method[method].revenue or 0))),
            }
            for method in PaymentMethod
            if method in by_method
        ]

        return {
            "total_revenue": quantize_money(Decimal(str(total_revenue or 0))),
            "pending_payments": quantize_money(Decimal(str(pending_payments or 0))),
            "average_order_value": average_order_value,
            "payment_methods": payment_methods,
        }
