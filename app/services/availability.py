"""Inventory availability: how many units of a product are still sellable.

A unit is sold when an order line for it belongs to an order that is not
cancelled. ``available = quantity - sold_count`` and must never go negative,
so every order creation checks all of its lines before anything is written.
The single-unit "sold / not sold" view is the same model with ``quantity=1``.
"""
from collections import Counter
from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError
from app.models.order import Order, OrderLine, OrderStatus
from app.models.product import Product


def _sold_query(db: Session):
    return (
        db.query(OrderLine.product_id, func.coalesce(func.sum(OrderLine.quantity), 0))
        .join(Order, Order.id == OrderLine.order_id)
        .filter(Order.status != OrderStatus.CANCELLED.value)
    )


def sold_subquery(db: Session):
    """``(product_id, sold)`` per product with sales, for joining into listings."""
    return (
        db.query(OrderLine.product_id.label("product_id"), func.sum(OrderLine.quantity).label("sold"))
        .join(Order, Order.id == OrderLine.order_id)
        .filter(Order.status != OrderStatus.CANCELLED.value)
        .group_by(OrderLine.product_id)
        .subquery()
    )


def sold_count(db: Session, product_id: int) -> int:
    """Units of the product allocated to orders that are not cancelled."""
    row = _sold_query(db).filter(OrderLine.product_id == product_id).group_by(OrderLine.product_id).first()
    return int(row[1]) if row else 0


def sold_counts(db: Session, product_ids: Iterable[int]) -> Dict[int, int]:
    """Bulk variant of :func:`sold_count`; products with no sales map to 0."""
    ids = list(product_ids)
    if not ids:
        return {}
    rows = _sold_query(db).filter(OrderLine.product_id.in_(ids)).group_by(OrderLine.product_id).all()
    counts = {product_id: 0 for product_id in ids}
    counts.update({product_id: int(total) for product_id, total in rows})
    return counts


def available(db: Session, product: Product) -> int:
    return product.quantity - sold_count(db, product.id)


def reserve_products(db: Session, product_ids: List[int]) -> Dict[int, Product]:
    """Lock the requested products and verify every unit can be sold.

    ``product_ids`` holds one entry per requested unit, so a product listed
    twice needs two available units. Rows are locked with ``FOR UPDATE``
    before counting so two concurrent orders cannot both take the last unit.
    Nothing is written; the caller inserts the lines in the same transaction
    and calls :func:`confirm_reserved` after flushing them.
    """
    requested = Counter(product_ids)
    products = (
        db.query(Product)
        .filter(Product.id.in_(list(requested)))
        .order_by(Product.id)
        .with_for_update()
        .all()
    )
    by_id = {product.id: product for product in products}

    missing = sorted(set(requested) - set(by_id))
    if missing:
        raise NotFoundError(
            f"Product {missing[0]} not found",
            details={"product_ids": missing},
        )

    sold = sold_counts(db, list(by_id))
    for product_id, units in requested.items():
        product = by_id[product_id]
        left = product.quantity - sold[product_id]
        if units > left:
            raise ConflictError(
                f"Insufficient availability for product '{product.name}'",
                details={"product_id": product_id, "requested": units, "available": left},
            )
    return by_id


def confirm_reserved(db: Session, products: Dict[int, Product]) -> None:
    """Re-count after the new lines were flushed and fail if any product is oversold.

    The flush has taken the store's write lock (SQLite has no row locks and
    ignores ``FOR UPDATE``), so another writer that passed the first check
    concurrently is either already visible here or blocked until we finish.
    """
    sold = sold_counts(db, list(products))
    for product_id, product in products.items():
        if sold[product_id] > product.quantity:
            raise ConflictError(
                f"Insufficient availability for product '{product.name}'",
                details={"product_id": product_id, "quantity": product.quantity, "sold_count": sold[product_id]},
            )
