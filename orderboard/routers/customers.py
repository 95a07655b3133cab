from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from orderboard.core.errors import NotFoundError
from orderboard.deps import get_analytics, get_customer_registry, get_order_repository
from orderboard.schemas.customer import CustomerCreate, CustomerRead, CustomerStatsRead, CustomerUpdate
from orderboard.schemas.order import OrderRead
from orderboard.services.analytics import AnalyticsAggregator
from orderboard.services.customers import CustomerRegistry
from orderboard.services.orders import OrderRepository

router = APIRouter(prefix="/api/customers", tags=["customers"])


def _get_or_404(registry: CustomerRegistry, customer_id: str):
    customer = registry.get(customer_id)
    if customer is None:
        raise NotFoundError("Cliente no encontrado")
    return customer


@router.get("", response_model=List[CustomerRead])
def list_customers(registry: CustomerRegistry = Depends(get_customer_registry)):
    return [CustomerRead.model_validate(customer) for customer in registry.list_all()]


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, registry: CustomerRegistry = Depends(get_customer_registry)):
    customer = registry.register(payload.model_dump())
    return CustomerRead.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: str, registry: CustomerRegistry = Depends(get_customer_registry)):
    return CustomerRead.model_validate(_get_or_404(registry, customer_id))


@router.patch("/{customer_id}", response_model=CustomerRead)
def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    registry: CustomerRegistry = Depends(get_customer_registry),
):
    customer = registry.update(customer_id, payload.model_dump(exclude_unset=True))
    return CustomerRead.model_validate(customer)


@router.get("/{customer_id}/stats", response_model=CustomerStatsRead)
def customer_stats(
    customer_id: str,
    registry: CustomerRegistry = Depends(get_customer_registry),
    analytics: AnalyticsAggregator = Depends(get_analytics),
):
    _get_or_404(registry, customer_id)
    return CustomerStatsRead(**analytics.get_customer_stats(customer_id))


@router.get("/{customer_id}/orders", response_model=List[OrderRead])
def customer_orders(
    customer_id: str,
    registry: CustomerRegistry = Depends(get_customer_registry),
    repo: OrderRepository = Depends(get_order_repository),
):
    _get_or_404(registry, customer_id)
    return [OrderRead.model_validate(order) for order in repo.list_for_customer(customer_id)]
