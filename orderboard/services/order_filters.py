from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, List

from sqlalchemy import or_

from orderboard.core.errors import ValidationError
from orderboard.models.customer import Customer
from orderboard.models.order import Order, OrderStatus, PaymentMethod
from orderboard.schemas.order import to_local_naive

# El panel envía "all" cuando no hay filtro seleccionado
ANY_VALUE = "all"


@dataclass(frozen=True)
class OrderFilters:
    """Optional constraints for listing orders; every field set is ANDed."""

    status: OrderStatus | None = None
    payment_method: PaymentMethod | None = None
    customer_id: str | None = None
    search: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    @classmethod
    def from_query(
        cls,
        *,
        status: str | None = None,
        payment_method: str | None = None,
        customer_id: str | None = None,
        search: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> "OrderFilters":
        return cls(
            status=_parse_enum(OrderStatus, status, "status"),
            payment_method=_parse_enum(PaymentMethod, payment_method, "paymentMethod"),
            customer_id=(customer_id or "").strip() or None,
            search=(search or "").strip() or None,
            start_date=parse_datetime(start_date, "startDate", is_end=False) if start_date else None,
            end_date=parse_datetime(end_date, "endDate", is_end=True) if end_date else None,
        )

    def criteria(self) -> List[Any]:
        conditions: List[Any] = []
        if self.status is not None:
            conditions.append(Order.status == self.status)
        if self.payment_method is not None:
            conditions.append(Order.payment_method == self.payment_method)
        if self.customer_id:
            conditions.append(Order.customer_id == self.customer_id)
        if self.search:
            pattern = f"%{_escape_like(self.search)}%"
            conditions.append(
                or_(
                    Customer.name.ilike(pattern, escape="\\"),
                    Order.product.ilike(pattern, escape="\\"),
                )
            )
        if self.start_date is not None:
            conditions.append(Order.created_at >= self.start_date)
        if self.end_date is not None:
            conditions.append(Order.created_at <= self.end_date)
        return conditions


def parse_datetime(value: str, field: str, is_end: bool = False) -> datetime:
    """Parse an ISO datetime or a bare date; a bare end date covers the whole day."""
    candidate = value.strip()
    try:
        parsed = datetime.fromisoformat(candidate.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed_date = date.fromisoformat(candidate)
        except ValueError as exc:
            raise ValidationError.for_field(field, "Fecha inválida") from exc
        return datetime.combine(parsed_date, time.max if is_end else time.min)

    if len(candidate) == 10 and is_end:
        parsed = datetime.combine(parsed.date(), time.max)
    # las fechas se guardan en hora local del servidor, sin zona
    return to_local_naive(parsed)


def _parse_enum(enum_cls, value: str | None, field: str):
    if value is None:
        return None
    candidate = value.strip().lower()
    if not candidate or candidate == ANY_VALUE:
        return None
    try:
        return enum_cls(candidate)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError.for_field(field, f"Valor inválido, use uno de: {allowed}") from exc


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
