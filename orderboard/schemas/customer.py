from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base of the API models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    phone: str = Field(..., min_length=1, max_length=30)
    email: EmailStr | None = None
    address: str | None = None

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, value: str) -> str:
        candidate = value.strip()
        if not candidate:
            raise ValueError("Campo obligatorio")
        return candidate

    @field_validator("email", "address", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        return blank_to_none(value)


class CustomerUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    phone: str | None = Field(default=None, min_length=1, max_length=30)
    email: EmailStr | None = None
    address: str | None = None

    @field_validator("name", "phone")
    @classmethod
    def not_null(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError("Campo obligatorio")
        return value.strip()

    @field_validator("email", "address", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        return blank_to_none(value)


class CustomerRead(CamelModel):
    id: str
    name: str
    phone: str
    email: str | None = None
    address: str | None = None
    created_at: datetime | None = None


class CustomerStatsRead(CamelModel):
    total_orders: int
    total_spent: Decimal
    last_order_date: datetime | None = None
