import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from orderboard.core.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class PaymentMethod(str, enum.Enum):
    DELIVERY = "delivery"  # paga al recibir
    ADVANCE = "advance"    # anticipo parcial
    FULL = "full"          # pago completo por adelantado


ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.IN_PROGRESS)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)

    product = Column(Text, nullable=False)
    theme = Column(Text, nullable=True)
    description = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)
    status = Column(
        SQLEnum(OrderStatus, name="order_status", values_callable=_enum_values),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_method = Column(
        SQLEnum(PaymentMethod, name="payment_method", values_callable=_enum_values),
        nullable=False,
    )
    advance_amount = Column(Numeric(10, 2), default=0, nullable=False)
    paid_amount = Column(Numeric(10, 2), default=0, nullable=False)

    delivery_date = Column(DateTime, nullable=True)
    delivery_address = Column(Text, nullable=True)
    product_image = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.now, server_default=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="orders", lazy="joined")
