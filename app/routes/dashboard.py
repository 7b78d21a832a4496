"""Dashboard route - aggregated counts and sums, read only."""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.auth import require_any_role
from app.database import get_db
from app.models.customer import Customer
from app.models.order import Order, OrderLine, OrderStatus
from app.models.payment import Payment
from app.models.product import Product
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.dashboard import DashboardResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

TOP_PRODUCTS = 5
RECENT_ORDERS = 5


@router.get("/", response_model=ApiResponse[DashboardResponse])
async def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Totals, orders per status, best sellers and latest orders."""
    revenue = db.query(func.coalesce(func.sum(Payment.amount), 0.0)).scalar()

    per_status = dict(db.query(Order.status, func.count(Order.id)).group_by(Order.status).all())
    orders_by_status = {s.value: per_status.get(s.value, 0) for s in OrderStatus}

    units = func.sum(OrderLine.quantity).label("units")
    top = (
        db.query(Product.id, Product.name, units)
        .join(OrderLine, OrderLine.product_id == Product.id)
        .join(Order, Order.id == OrderLine.order_id)
        .filter(Order.status != OrderStatus.CANCELLED.value)
        .group_by(Product.id, Product.name)
        .order_by(units.desc(), Product.id)
        .limit(TOP_PRODUCTS)
        .all()
    )

    recent = (
        db.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDERS)
        .all()
    )

    return {"data": {
        "totals": {
            "customers": db.query(Customer).count(),
            "products": db.query(Product).count(),
            "orders": sum(per_status.values()),
            "revenue": float(revenue or 0),
        },
        "orders_by_status": orders_by_status,
        "top_products": [
            {"product_id": product_id, "name": name, "units_sold": int(sold)}
            for product_id, name, sold in top
        ],
        "recent_orders": [
            {
                "id": order.id,
                "status": order.status,
                "created_at": order.created_at,
                "customer_name": order.customer.name if order.customer else None,
                "total": order.total,
            }
            for order in recent
        ],
    }}
