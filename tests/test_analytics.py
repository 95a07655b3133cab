from datetime import datetime
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from orderboard.core.database import Base, configure_sqlite_engine
from orderboard.models.customer import Customer
from orderboard.models.order import Order, OrderStatus, PaymentMethod
from orderboard.services.analytics import AnalyticsAggregator
from tests.fixtures_data import FIXED_NOW


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


def _add_order(db, customer, created_at, price, paid, status=OrderStatus.PENDING, method=PaymentMethod.ADVANCE):
    order = Order(
        customer_id=customer.id,
        product="Agenda",
        price=Decimal(price),
        paid_amount=Decimal(paid),
        advance_amount=Decimal(paid) if method == PaymentMethod.ADVANCE else Decimal("0"),
        status=status,
        payment_method=method,
        created_at=created_at,
        updated_at=created_at,
    )
    db.add(order)
    return order


def _seed(db):
    ana = Customer(id="c-ana", name="Ana", phone="600111222", created_at=datetime(2026, 1, 10))
    luis = Customer(id="c-luis", name="Luis", phone="622333444", created_at=datetime(2026, 1, 10))
    eva = Customer(id="c-eva", name="Eva", phone="644555666", created_at=datetime(2026, 1, 10))
    db.add_all([ana, luis, eva])
    db.flush()

    # este mes
    _add_order(db, ana, datetime(2026, 10, 2, 9, 0), "20.00", "5.00")
    _add_order(
        db, luis, datetime(2026, 10, 18, 17, 0), "12.50", "12.50", OrderStatus.COMPLETED, PaymentMethod.FULL
    )
    # mes anterior, dentro de la ventana de clientes activos
    _add_order(db, ana, datetime(2026, 9, 5, 10, 0), "30.00", "30.00", OrderStatus.COMPLETED, PaymentMethod.FULL)
    # dentro de la ventana de ingresos, fuera de la de clientes activos
    _add_order(
        db, eva, datetime(2026, 5, 20, 10, 0), "18.00", "0.00", OrderStatus.IN_PROGRESS, PaymentMethod.DELIVERY
    )
    # fuera de todas las ventanas
    _add_order(db, eva, datetime(2026, 1, 15, 10, 0), "40.00", "40.00", OrderStatus.COMPLETED, PaymentMethod.FULL)
    db.commit()
    return ana, luis, eva


def test_stats_use_calendar_month_and_three_month_window():
    db = _build_session()
    _seed(db)

    stats = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_stats()

    assert stats == {
        "active_orders": 2,
        "completed_orders": 3,
        "monthly_revenue": Decimal("17.50"),
        "active_customers": 2,
    }


def test_stats_on_empty_database_are_zero():
    db = _build_session()

    stats = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_stats()

    assert stats == {
        "active_orders": 0,
        "completed_orders": 0,
        "monthly_revenue": Decimal("0.00"),
        "active_customers": 0,
    }


def test_monthly_revenue_is_ascending_and_skips_empty_months():
    db = _build_session()
    _seed(db)

    points = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_monthly_revenue()

    assert points == [
        {"month": "2026-05", "revenue": Decimal("0.00")},
        {"month": "2026-09", "revenue": Decimal("30.00")},
        {"month": "2026-10", "revenue": Decimal("17.50")},
    ]


def test_status_distribution_follows_status_order_and_omits_zero_counts():
    db = _build_session()
    ana, _, _ = _seed(db)
    _add_order(db, ana, datetime(2026, 10, 3), "10.00", "0.00", OrderStatus.PENDING, PaymentMethod.DELIVERY)
    db.commit()

    distribution = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_status_distribution()

    assert distribution == [
        {"status": OrderStatus.PENDING, "count": 2},
        {"status": OrderStatus.IN_PROGRESS, "count": 1},
        {"status": OrderStatus.COMPLETED, "count": 3},
    ]


def test_status_distribution_without_completed_orders():
    db = _build_session()
    ana = Customer(id="c-ana", name="Ana", phone="600111222")
    db.add(ana)
    db.flush()
    _add_order(db, ana, datetime(2026, 10, 3), "10.00", "0.00")
    db.commit()

    distribution = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_status_distribution()

    assert distribution == [{"status": OrderStatus.PENDING, "count": 1}]


def test_customer_stats_sum_price_and_track_last_order():
    db = _build_session()
    ana, _, _ = _seed(db)

    stats = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_customer_stats(ana.id)

    assert stats == {
        "total_orders": 2,
        "total_spent": Decimal("50.00"),
        "last_order_date": datetime(2026, 10, 2, 9, 0),
    }


def test_customer_stats_without_orders():
    db = _build_session()
    db.add(Customer(id="c-new", name="Nuevo", phone="1"))
    db.commit()

    stats = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_customer_stats("c-new")

    assert stats == {"total_orders": 0, "total_spent": Decimal("0.00"), "last_order_date": None}


def test_finance_summary_splits_collected_and_pending_amounts():
    db = _build_session()
    _seed(db)

    summary = AnalyticsAggregator(db, now=lambda: FIXED_NOW).get_finance_summary()

    assert summary["total_revenue"] == Decimal("87.50")
    assert summary["pending_payments"] == Decimal("33.00")
    assert summary["average_order_value"] == Decimal("27.50")
    assert summary["payment_methods"] == [
        {"payment_method": PaymentMethod.DELIVERY, "count": 1, "revenue": Decimal("0.00")},
        {"payment_method": PaymentMethod.ADVANCE, "count": 1, "revenue": Decimal("5.00")},
        {"payment_method": PaymentMethod.FULL, "count": 3, "revenue": Decimal("82.50")},
    ]
