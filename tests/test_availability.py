"""Sold counts and availability across order creation and cancellation."""
import pytest

from app.errors import ConflictError, NotFoundError
from app.models import Order, OrderLine, OrderStatus
from app.services.availability import available, reserve_products, sold_count, sold_counts


def _order_with_lines(db, customer, products, status=OrderStatus.PENDING):
    order = Order(customer=customer, status=status.value)
    db.add(order)
    for product in products:
        db.add(OrderLine(order=order, product=product, product_name=product.name, quantity=1, unit_price=product.price))
    db.commit()
    return order


def test_unsold_product_is_fully_available(db, make_product):
    product = make_product(quantity=3)
    assert sold_count(db, product.id) == 0
    assert available(db, product) == 3


def test_cancelled_orders_do_not_count_as_sold(db, customer, make_product):
    product = make_product(quantity=3)
    _order_with_lines(db, customer, [product, product])
    _order_with_lines(db, customer, [product], status=OrderStatus.CANCELLED)

    assert sold_count(db, product.id) == 2
    assert available(db, product) == 1


def test_paid_and_delivered_orders_count_as_sold(db, customer, make_product):
    product = make_product(quantity=2)
    _order_with_lines(db, customer, [product], status=OrderStatus.PAID)
    _order_with_lines(db, customer, [product], status=OrderStatus.DELIVERED)
    assert available(db, product) == 0


def test_sold_counts_reports_zero_for_unsold(db, customer, make_product):
    sold = make_product(name="Vase")
    unsold = make_product(name="Rug")
    _order_with_lines(db, customer, [sold])

    assert sold_counts(db, [sold.id, unsold.id]) == {sold.id: 1, unsold.id: 0}
    assert sold_counts(db, []) == {}


def test_reserve_counts_each_line_as_one_unit(db, make_product):
    product = make_product(quantity=2)
    assert set(reserve_products(db, [product.id, product.id])) == {product.id}

    with pytest.raises(ConflictError) as exc:
        reserve_products(db, [product.id, product.id, product.id])
    assert exc.value.details == {"product_id": product.id, "requested": 3, "available": 2}


def test_reserve_rejects_unknown_product(db, make_product):
    product = make_product()
    with pytest.raises(NotFoundError) as exc:
        reserve_products(db, [product.id, 999])
    assert exc.value.details == {"product_ids": [999]}


def test_single_unit_product_behaves_as_sold_flag(client, customer, make_product, seller_headers, create_order):
    product = make_product(quantity=1)

    before = client.get(f"/api/products/{product.id}", headers=seller_headers).json()["data"]
    assert before["sold"] is False and before["is_available"] is True

    assert create_order(customer.id, [product.id]).status_code == 201

    after = client.get(f"/api/products/{product.id}", headers=seller_headers).json()["data"]
    assert after["sold_count"] == 1
    assert after["available"] == 0
    assert after["sold"] is True and after["is_available"] is False


def test_availability_never_negative_over_a_sequence(client, db, customer, make_product, seller_headers, create_order):
    product = make_product(quantity=2)

    results = [create_order(customer.id, [product.id]).status_code for _ in range(4)]
    assert results == [201, 201, 400, 400]
    assert available(db, product) == 0

    first_id = db.query(Order).order_by(Order.id).first().id
    cancel = client.put(f"/api/orders/{first_id}", json={"status": "cancelled"}, headers=seller_headers)
    assert cancel.status_code == 200
    db.expire_all()
    assert available(db, product) == 1

    assert create_order(customer.id, [product.id]).status_code == 201
    assert available(db, product) == 0
