from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import EmailStr, Field, computed_field, field_validator, model_validator

from orderboard.models.order import OrderStatus, PaymentMethod
from orderboard.schemas.customer import CamelModel, CustomerRead, blank_to_none

CENT = Decimal("0.01")

Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


def to_local_naive(value: datetime | None) -> datetime | None:
    """Aware datetimes become server local wall time without tzinfo, as stored."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def quantize_money(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def derive_paid_amount(payment_method: PaymentMethod, price: Decimal, advance_amount: Decimal) -> Decimal:
    """Amount already paid when the order is taken.

    full -> the whole price, advance -> the advance, delivery -> nothing yet.
    """
    if payment_method == PaymentMethod.FULL:
        return price
    if payment_method == PaymentMethod.ADVANCE:
        return advance_amount
    return Decimal("0.00")


class OrderCreate(CamelModel):
    customer_name: str = Field(..., min_length=1, max_length=120)
    customer_phone: str = Field(..., min_length=1, max_length=30)
    customer_email: EmailStr | None = None

    product: str = Field(..., min_length=1)
    theme: str | None = None
    description: str | None = None
    price: Money
    status: OrderStatus = OrderStatus.PENDING
    payment_method: PaymentMethod
    advance_amount: Money = Decimal("0.00")
    # None = derivar del método de pago
    paid_amount: Money | None = None

    delivery_date: datetime | None = None
    delivery_address: str | None = None
    product_image: str | None = None
    notes: str | None = None

    @field_validator("customer_name", "customer_phone", "product")
    @classmethod
    def strip_required(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("Campo obligatorio")
        return candidate

    @field_validator(
        "customer_email",
        "theme",
        "description",
        "delivery_date",
        "delivery_address",
        "product_image",
        "notes",
        mode="before",
    )
    @classmethod
    def empty_as_missing(cls, value):
        return blank_to_none(value)

    @field_validator("price", "advance_amount", "paid_amount")
    @classmethod
    def to_cents(cls, value: Decimal | None) -> Decimal | None:
        return quantize_money(value)

    @field_validator("delivery_date")
    @classmethod
    def delivery_in_local_time(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value)

    @model_validator(mode="after")
    def fill_paid_amount(self) -> "OrderCreate":
        if self.paid_amount is None:
            self.paid_amount = derive_paid_amount(self.payment_method, self.price, self.advance_amount)
        return self

    def order_fields(self) -> dict:
        return self.model_dump(exclude={"customer_name", "customer_phone", "customer_email"})


NON_NULLABLE_UPDATE_FIELDS = ("product", "price", "status", "payment_method", "advance_amount", "paid_amount")


class OrderUpdate(CamelModel):
    product: str | None = Field(default=None, min_length=1)
    theme: str | None = None
    description: str | None = None
    price: Money | None = None
    status: OrderStatus | None = None
    payment_method: PaymentMethod | None = None
    advance_amount: Money | None = None
    paid_amount: Money | None = None
    delivery_date: datetime | None = None
    delivery_address: str | None = None
    product_image: str | None = None
    notes: str | None = None

    @field_validator(*NON_NULLABLE_UPDATE_FIELDS)
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("No puede ser nulo")
        return value

    @field_validator("delivery_date", mode="before")
    @classmethod
    def empty_date_as_missing(cls, value):
        return blank_to_none(value)

    @field_validator("price", "advance_amount", "paid_amount")
    @classmethod
    def to_cents(cls, value: Decimal | None) -> Decimal | None:
        return quantize_money(value)

    @field_validator("delivery_date")
    @classmethod
    def delivery_in_local_time(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class OrderRead(CamelModel):
    id: str
    customer_id: str
    product: str
    theme: str | None = None
    description: str | None = None
    price: Decimal
    status: OrderStatus
    payment_method: PaymentMethod
    advance_amount: Decimal
    paid_amount: Decimal
    delivery_date: datetime | None = None
    delivery_address: str | None = None
    product_image: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    customer: CustomerRead

    @computed_field(alias="paymentStatus")
    @property
    def payment_status(self) -> str:
        paid = self.paid_amount or Decimal("0")
        if paid >= self.price:
            return "paid"
        if paid > 0:
            return "partial"
        return "pending"

    @computed_field(alias="remainingAmount")
    @property
    def remaining_amount(self) -> Decimal:
        return quantize_money(self.price - (self.paid_amount or Decimal("0")))


class ImageUploadResponse(CamelModel):
    image_url: str
    order: OrderRead
