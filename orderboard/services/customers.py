from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from orderboard.core.errors import NotFoundError, UpstreamFailure
from orderboard.models.customer import Customer

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {"name", "phone", "email", "address"}


class CustomerRegistry:
    """Customers keyed by phone number.

    Phones are compared exactly as typed: "600 111 222" and "600111222" are two
    different customers. Methods only ``flush``; committing is up to the caller
    so an order and its new customer land in the same transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, customer_id: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def find_by_phone(self, phone: str) -> Optional[Customer]:
        return (
            self.db.query(Customer)
            .filter(Customer.phone == phone)
            .order_by(Customer.created_at.asc())
            .first()
        )

    def list_all(self) -> List[Customer]:
        return self.db.query(Customer).order_by(desc(Customer.created_at)).all()

    def create(
        self,
        name: str,
        phone: str,
        email: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Customer:
        customer = Customer(name=name, phone=phone, email=email or None, address=address or None)
        self.db.add(customer)
        self.db.flush()
        logger.info("customer created", extra={"customer_id": customer.id})
        return customer

    def resolve_for_order(self, name: str, phone: str, email: Optional[str] = None) -> Customer:
        customer = self.find_by_phone(phone)
        if customer is not None:
            # el primer nombre registrado se conserva
            return customer
        return self.create(name=name, phone=phone, email=email)

    def register(self, fields: Dict[str, Any]) -> Customer:
        try:
            customer = self.create(**fields)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamFailure("No se pudo crear el cliente") from exc
        self.db.refresh(customer)
        return customer

    def update(self, customer_id: str, fields: Dict[str, Any]) -> Customer:
        customer = self.get(customer_id)
        if customer is None:
            raise NotFoundError("Cliente no encontrado")

        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(customer, key, value)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamFailure("No se pudo actualizar el cliente") from exc
        self.db.refresh(customer)
        logger.info("customer updated", extra={"customer_id": customer.id})
        return customer
