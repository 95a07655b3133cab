# orderboard/deps.py
from __future__ import annotations

from datetime import datetime
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from orderboard.core.database import get_db
from orderboard.services.analytics import AnalyticsAggregator
from orderboard.services.customers import CustomerRegistry
from orderboard.services.orders import OrderRepository
from orderboard.services.r2_storage import R2ImageStorage


def get_clock() -> Callable[[], datetime]:
    """Hora local del servidor; los tests la fijan con dependency_overrides."""
    return datetime.now


def get_order_repository(
    db: Session = Depends(get_db),
    now: Callable[[], datetime] = Depends(get_clock),
) -> OrderRepository:
    return OrderRepository(db, now=now)


def get_customer_registry(db: Session = Depends(get_db)) -> CustomerRegistry:
    return CustomerRegistry(db)


def get_analytics(
    db: Session = Depends(get_db),
    now: Callable[[], datetime] = Depends(get_clock),
) -> AnalyticsAggregator:
    return AnalyticsAggregator(db, now=now)


def get_image_storage() -> R2ImageStorage:
    return R2ImageStorage()
