"""Payment ledger: recording, adjusting and removing payments on orders.

An order is ``paid`` exactly when a payment was recorded for it here, so
every write that touches a payment also settles the order's status within
the same transaction.
"""
import logging

from sqlalchemy.orm import Session

from app.database import commit_or_raise
from app.errors import ConflictError, NotFoundError
from app.models.order import Order, OrderStatus
from app.models.payment import Payment
from app.schemas.payment import PaymentBase, PaymentUpdate
from app.services.orders import get_order_or_404

logger = logging.getLogger(__name__)


def get_payment_or_404(db: Session, payment_id: int) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise NotFoundError("Payment not found")
    return payment


def record_payment(db: Session, order_id: int, payment_data: PaymentBase) -> Payment:
    """Record a payment on a pending order and mark the order paid.

    The status change is a conditional ``UPDATE ... WHERE status = 'pending'``
    so that of two concurrent payments for the same order only one matches,
    including on SQLite where the row lock above is a no-op.
    """
    order = get_order_or_404(db, order_id, for_update=True)
    if order.status != OrderStatus.PENDING.value:
        raise ConflictError(
            f"Cannot record a payment. The order is in status: {order.status}",
            details={"current_status": order.status},
        )

    claimed = (
        db.query(Order)
        .filter(Order.id == order_id, Order.status == OrderStatus.PENDING.value)
        .update({Order.status: OrderStatus.PAID.value}, synchronize_session=False)
    )
    if not claimed:
        db.rollback()
        current = get_order_or_404(db, order_id).status
        raise ConflictError(
            f"Cannot record a payment. The order is in status: {current}",
            details={"current_status": current},
        )

    payment = Payment(order_id=order_id, **payment_data.model_dump())
    db.add(payment)
    commit_or_raise(db, "record payment")

    db.refresh(payment)
    logger.info("Recorded payment %s of %.2f (%s) for order %s", payment.id, payment.amount, payment.method, order_id)
    return payment


def update_payment(db: Session, payment_id: int, payment_update: PaymentUpdate) -> Payment:
    """Adjust amount, method or proof; the order's status is left alone."""
    payment = get_payment_or_404(db, payment_id)
    update_data = payment_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field != "proof_url":
            continue
        setattr(payment, field, value)

    commit_or_raise(db, "update payment")
    db.refresh(payment)
    return payment


def delete_payment(db: Session, payment_id: int) -> int:
    """Remove a payment and reopen its order as pending. Returns the order id."""
    payment = get_payment_or_404(db, payment_id)
    order = payment.order
    previous = order.status

    if previous != OrderStatus.PAID.value:
        logger.warning(
            "Payment %s removed from order %s in status '%s'; order reset to pending, review manually",
            payment_id, order.id, previous
        )

    db.delete(payment)
    order.status = OrderStatus.PENDING.value
    commit_or_raise(db, "delete payment")

    logger.info("Deleted payment %s; order %s is pending again", payment_id, order.id)
    return order.id
