"""Sales summary route - units and revenue from order lines, read only."""
from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.auth import require_any_role
from app.database import get_db
from app.models.order import Order, OrderLine, OrderStatus
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.summary import SalesSummary

router = APIRouter(prefix="/summary", tags=["Summary"])


@router.get("/", response_model=ApiResponse[SalesSummary])
async def get_sales_summary(
    date_from: Optional[date] = Query(None, description="First day included"),
    date_to: Optional[date] = Query(None, description="Last day included"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Units sold and revenue at the agreed line prices, per day and per product."""
    units = func.coalesce(func.sum(OrderLine.quantity), 0)
    revenue = func.coalesce(func.sum(OrderLine.quantity * OrderLine.unit_price), 0.0)
    orders = func.count(func.distinct(Order.id))

    def sales(*columns):
        query = (
            db.query(*columns)
            .select_from(OrderLine)
            .join(Order, Order.id == OrderLine.order_id)
            .filter(Order.status != OrderStatus.CANCELLED.value)
        )
        if date_from:
            query = query.filter(Order.created_at >= datetime.combine(date_from, time.min))
        if date_to:
            query = query.filter(Order.created_at < datetime.combine(date_to + timedelta(days=1), time.min))
        return query

    total_orders, total_units, total_revenue = sales(orders, units, revenue).one()

    day = func.date(Order.created_at)
    by_day = sales(day, orders, units, revenue).group_by(day).order_by(day).all()

    product_units = units.label("units")
    by_product = (
        sales(OrderLine.product_id, OrderLine.product_name, product_units, revenue)
        .group_by(OrderLine.product_id, OrderLine.product_name)
        .order_by(product_units.desc(), OrderLine.product_name)
        .all()
    )

    return {"data": {
        "totals": {"orders": total_orders, "units": int(total_units), "revenue": float(total_revenue)},
        "by_day": [
            {"day": d, "orders": n, "units": int(u), "revenue": float(r)}
            for d, n, u, r in by_day
        ],
        "by_product": [
            {"product_id": pid, "product_name": name, "units": int(u), "revenue": float(r)}
            for pid, name, u, r in by_product
        ],
    }}
