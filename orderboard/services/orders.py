from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import and_, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from orderboard.core.errors import NotFoundError, UpstreamFailure, ValidationError
from orderboard.models.customer import Customer
from orderboard.models.order import Order, OrderStatus, PaymentMethod
from orderboard.schemas.order import OrderCreate
from orderboard.services.customers import CustomerRegistry
from orderboard.services.order_filters import OrderFilters, parse_datetime

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "product",
    "theme",
    "description",
    "price",
    "status",
    "payment_method",
    "advance_amount",
    "paid_amount",
    "delivery_date",
    "delivery_address",
    "product_image",
    "notes",
}

_ENUM_FIELDS = {"status": OrderStatus, "payment_method": PaymentMethod}


class OrderRepository:
    """Orders joined with their customer.

    Status changes are free in both directions (completed -> pending is
    allowed) and ``paid_amount`` is stored as given, even above ``price``.
    """

    def __init__(self, db: Session, now: Callable[[], datetime] = datetime.now):
        self.db = db
        self.now = now
        self.customers = CustomerRegistry(db)

    def _query(self):
        return self.db.query(Order).join(Customer, Order.customer_id == Customer.id).options(
            contains_eager(Order.customer)
        )

    def get_by_id(self, order_id: str) -> Optional[Order]:
        return self._query().filter(Order.id == order_id).first()

    def list_filtered(self, filters: OrderFilters | None = None) -> List[Order]:
        query = self._query()
        conditions = (filters or OrderFilters()).criteria()
        if conditions:
            query = query.filter(and_(*conditions))
        return query.order_by(desc(Order.created_at), desc(Order.id)).all()

    def list_for_customer(self, customer_id: str) -> List[Order]:
        return self.list_filtered(OrderFilters(customer_id=customer_id))

    def create(self, payload: OrderCreate) -> Order:
        timestamp = self.now()
        try:
            customer = self.customers.resolve_for_order(
                name=payload.customer_name,
                phone=payload.customer_phone,
                email=payload.customer_email,
            )
            order = Order(
                **payload.order_fields(),
                customer_id=customer.id,
                created_at=timestamp,
                updated_at=timestamp,
            )
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamFailure("No se pudo crear el pedido") from exc

        self.db.refresh(order)
        logger.info(
            "order created payment_method=%s",
            order.payment_method.value,
            extra={"order_id": order.id, "customer_id": order.customer_id},
        )
        return order

    def update(self, order_id: str, changes: Dict[str, Any]) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if order is None:
            raise NotFoundError("Pedido no encontrado")

        for key, value in _clean_changes(changes).items():
            setattr(order, key, value)
        order.updated_at = self.now()

        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamFailure("No se pudo actualizar el pedido") from exc

        self.db.refresh(order)
        logger.info("order updated fields=%s", sorted(changes), extra={"order_id": order.id})
        return order

    def set_completion_image(self, order_id: str, image_url: str) -> Order:
        return self.update(order_id, {"product_image": image_url})

    def delete(self, order_id: str) -> bool:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if order is None:
            logger.info("order delete skipped, not found", extra={"order_id": order_id})
            return False

        try:
            self.db.delete(order)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamFailure("No se pudo eliminar el pedido") from exc

        logger.info("order deleted", extra={"order_id": order_id})
        return True


def _clean_changes(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known fields that were actually sent, with strings coerced to column types."""
    clean: Dict[str, Any] = {}
    for key, value in changes.items():
        if key not in UPDATABLE_FIELDS:
            logger.debug("ignoring non updatable order field %s", key)
            continue
        if key == "delivery_date" and isinstance(value, str):
            value = parse_datetime(value, "deliveryDate") if value.strip() else None
        elif key in _ENUM_FIELDS and isinstance(value, str):
            try:
                value = _ENUM_FIELDS[key](value)
            except ValueError as exc:
                raise ValidationError.for_field(key, "Valor inválido") from exc
        clean[key] = value
    return clean
