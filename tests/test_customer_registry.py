from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from orderboard.core.database import Base, configure_sqlite_engine
from orderboard.core.errors import NotFoundError
from orderboard.models.customer import Customer
from orderboard.services.customers import CustomerRegistry


def _build_session():
    engine = configure_sqlite_engine(
        create_engine(
            "sqlite+pysqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return testing_session_local()


def test_resolve_for_order_creates_customer_on_first_order():
    db = _build_session()
    registry = CustomerRegistry(db)

    customer = registry.resolve_for_order(name="Ana", phone="600111222", email="ana@example.com")
    db.commit()

    assert customer.id
    assert customer.name == "Ana"
    assert customer.email == "ana@example.com"
    assert customer.created_at is not None
    assert db.query(Customer).count() == 1


def test_resolve_for_order_reuses_customer_and_keeps_first_name():
    db = _build_session()
    registry = CustomerRegistry(db)

    first = registry.resolve_for_order(name="Ana", phone="600111222")
    db.commit()
    second = registry.resolve_for_order(name="Ana María", phone="600111222", email="otra@example.com")
    db.commit()

    assert second.id == first.id
    assert second.name == "Ana"
    assert second.email is None
    assert db.query(Customer).count() == 1


def test_find_by_phone_does_not_normalize_formatting():
    db = _build_session()
    registry = CustomerRegistry(db)
    registry.create(name="Ana", phone="600111222")
    db.commit()

    assert registry.find_by_phone("600 111 222") is None
    assert registry.find_by_phone("600111222") is not None


def test_update_changes_only_known_fields():
    db = _build_session()
    registry = CustomerRegistry(db)
    customer = registry.register({"name": "Ana", "phone": "600111222", "email": None, "address": None})

    updated = registry.update(customer.id, {"address": "Calle Luna 3", "id": "otro-id"})

    assert updated.id == customer.id
    assert updated.address == "Calle Luna 3"


def test_update_missing_customer_raises_not_found():
    db = _build_session()

    with pytest.raises(NotFoundError):
        CustomerRegistry(db).update("does-not-exist", {"name": "X"})


def test_list_all_returns_newest_first():
    db = _build_session()
    registry = CustomerRegistry(db)

    db.add(Customer(name="Vieja", phone="1", created_at=datetime(2026, 1, 1)))
    db.add(Customer(name="Nueva", phone="2", created_at=datetime(2026, 5, 1)))
    db.commit()

    assert [customer.name for customer in registry.list_all()] == ["Nueva", "Vieja"]
