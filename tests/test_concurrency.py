"""Two sessions racing for the same unit or the same order.

These run against a file-backed SQLite database so that each session has its
own connection, the way two requests in separate worker threads would.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base
from app.errors import ConflictError
from app.models import Customer, Order, OrderLine, OrderStatus, Payment, Product
from app.schemas.order import OrderCreate
from app.schemas.payment import PaymentBase
from app.services import orders as order_service
from app.services import payments as payment_service
from app.services.availability import confirm_reserved, reserve_products, sold_count


@pytest.fixture
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'backoffice.db'}",
        connect_args={"check_same_thread": False, "timeout": 5},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sessions(file_engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    first, second, check = Session(), Session(), Session()
    yield first, second, check
    for session in (first, second, check):
        session.close()


@pytest.fixture
def stock(sessions):
    """One customer and a product with a single unit."""
    check = sessions[2]
    customer = Customer(name="Carla Customer")
    product = Product(name="Lamp", price=10.0, quantity=1)
    check.add_all([customer, product])
    check.commit()
    return customer.id, product.id


def _stage_order(db, customer_id, products):
    order = Order(customer_id=customer_id, status=OrderStatus.PENDING.value)
    db.add(order)
    for product in products.values():
        db.add(OrderLine(order=order, product=product, product_name=product.name, quantity=1, unit_price=10.0))
    db.flush()
    return order


def test_recount_after_flush_rejects_the_later_writer(sessions, stock):
    first, second, check = sessions
    customer_id, product_id = stock

    # Both sessions pass the first check before either has written.
    reserved_first = reserve_products(first, [product_id])
    reserved_second = reserve_products(second, [product_id])

    _stage_order(first, customer_id, reserved_first)
    confirm_reserved(first, reserved_first)
    first.commit()

    _stage_order(second, customer_id, reserved_second)
    with pytest.raises(ConflictError) as excinfo:
        confirm_reserved(second, reserved_second)
    second.rollback()

    assert excinfo.value.details == {"product_id": product_id, "quantity": 1, "sold_count": 2}
    assert sold_count(check, product_id) == 1
    assert check.query(Order).count() == 1


def test_concurrent_orders_for_last_unit_sell_it_once(sessions, stock, monkeypatch):
    first, second, check = sessions
    customer_id, product_id = stock
    order_data = OrderCreate(customer_id=customer_id, lines=[{"product_id": product_id, "unit_price": 10.0}])

    real_reserve = order_service.reserve_products
    winners = []

    def reserve_then_other_request_commits(db, product_ids):
        reserved = real_reserve(db, product_ids)
        if db is second and not winners:
            winners.append(order_service.create_order(first, order_data))
        return reserved

    monkeypatch.setattr(order_service, "reserve_products", reserve_then_other_request_commits)

    with pytest.raises(ConflictError):
        order_service.create_order(second, order_data)

    assert len(winners) == 1
    assert sold_count(check, product_id) == 1
    assert check.query(Order).count() == 1
    assert check.query(OrderLine).count() == 1


def test_second_payment_on_same_order_loses(sessions, stock, monkeypatch):
    first, second, check = sessions
    customer_id, product_id = stock
    order = order_service.create_order(
        check, OrderCreate(customer_id=customer_id, lines=[{"product_id": product_id, "unit_price": 10.0}])
    )
    order_id = order.id

    # The second request read the order while it was still pending.
    stale = order_service.get_order_or_404(second, order_id)
    real_get = payment_service.get_order_or_404

    def stale_read(db, oid, for_update=False):
        if db is second and for_update:
            return stale
        return real_get(db, oid, for_update)

    monkeypatch.setattr(payment_service, "get_order_or_404", stale_read)

    payment_service.record_payment(first, order_id, PaymentBase(amount=10.0, method="cash"))
    with pytest.raises(ConflictError) as excinfo:
        payment_service.record_payment(second, order_id, PaymentBase(amount=10.0, method="card"))

    assert excinfo.value.details == {"current_status": "paid"}
    assert check.query(Payment).count() == 1
    check.expire_all()
    assert check.query(Order).filter(Order.id == order_id).one().status == "paid"
