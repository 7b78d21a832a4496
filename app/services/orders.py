"""Order lifecycle: creation with availability check, state changes, deletion."""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import commit_or_raise
from app.errors import ConflictError, NotFoundError, UpstreamError, ValidationError
from app.models.customer import Customer
from app.models.order import Order, OrderLine, OrderStatus
from app.models.payment import Payment
from app.schemas.order import OrderCreate, OrderUpdate
from app.schemas.payment import PaymentBase
from app.services.availability import confirm_reserved, reserve_products

logger = logging.getLogger(__name__)

# Explicit transitions allowed through a plain order update. ``paid`` is only
# reached by recording a payment and ``pending`` only by removing one.
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

DELETABLE_STATES = {OrderStatus.PENDING, OrderStatus.CANCELLED}


def get_order_or_404(db: Session, order_id: int, for_update: bool = False) -> Order:
    query = db.query(Order).filter(Order.id == order_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    order = query.first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def _add_payment(db: Session, order: Order, payment: PaymentBase) -> Payment:
    db_payment = Payment(order=order, **payment.model_dump())
    db.add(db_payment)
    return db_payment


def create_order(db: Session, order_data: OrderCreate) -> Order:
    """Create an order, its lines and, for a direct sale, its payment.

    All lines are checked against availability before any row is added,
    and everything is committed as one transaction: either the order and
    all of its rows exist afterwards, or none of them do.
    """
    if order_data.direct_sale and order_data.payment is None:
        raise ValidationError("A direct sale requires an inline payment")
    if not order_data.direct_sale and order_data.payment is not None:
        raise ValidationError(
            "An inline payment is only accepted for a direct sale; record it with POST /orders/{id}/payment",
            details={"direct_sale": False},
        )

    customer = db.query(Customer).filter(Customer.id == order_data.customer_id).first()
    if not customer:
        raise NotFoundError("Customer not found")

    try:
        products = reserve_products(db, [line.product_id for line in order_data.lines])

        status = OrderStatus.PAID if order_data.direct_sale else OrderStatus.PENDING
        order = Order(customer=customer, notes=order_data.notes, status=status.value)
        db.add(order)

        for line in order_data.lines:
            product = products[line.product_id]
            db.add(OrderLine(
                order=order,
                product=product,
                product_name=product.name,
                quantity=1,
                unit_price=line.unit_price,
            ))

        if order_data.direct_sale:
            _add_payment(db, order, order_data.payment)

        db.flush()
        confirm_reserved(db, products)
    except (ConflictError, NotFoundError):
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Rolled back order creation for customer %s: %s", order_data.customer_id, e)
        raise UpstreamError("Could not create order", details={"error": str(e)}) from e

    commit_or_raise(db, "create order")
    db.refresh(order)
    logger.info(
        "Created order %s (%s) with %d line(s) for customer %s",
        order.id, order.status, len(order_data.lines), order.customer_id
    )
    return order


def update_order(db: Session, order_id: int, order_update: OrderUpdate) -> Order:
    """Update notes and/or move the order to another state."""
    order = get_order_or_404(db, order_id)
    current = OrderStatus(order.status)
    target = order_update.status

    if target is not None and target != current:
        if target == OrderStatus.PAID:
            raise ConflictError(
                "Orders become paid by recording a payment",
                details={"current_status": current.value},
            )
        if target not in ALLOWED_TRANSITIONS[current]:
            raise ConflictError(
                f"Cannot change order from '{current.value}' to '{target.value}'",
                details={"current_status": current.value},
            )
        order.status = target.value

    if "notes" in order_update.model_fields_set:
        order.notes = order_update.notes

    commit_or_raise(db, "update order")
    db.refresh(order)
    if target is not None and target != current:
        logger.info("Order %s moved from %s to %s", order.id, current.value, target.value)
    return order


def delete_order(db: Session, order_id: int) -> None:
    """Delete a pending or cancelled order together with its lines."""
    order = get_order_or_404(db, order_id)
    current = OrderStatus(order.status)
    if current not in DELETABLE_STATES:
        raise ConflictError(
            f"Cannot delete an order in status '{current.value}'",
            details={"current_status": current.value},
        )

    for line in list(order.lines):
        db.delete(line)
    db.delete(order)
    commit_or_raise(db, "delete order")
    logger.info("Deleted order %s", order_id)

