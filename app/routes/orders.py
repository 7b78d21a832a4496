"""Order routes."""
from typing import List, Optional

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from app.auth import require_any_role, require_staff
from app.database import get_db
from app.models.user import User
from app.models.order import Order, OrderStatus
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.order import OrderCreate, OrderResponse, OrderUpdate, OrderLineResponse
from app.schemas.payment import PaymentBase, PaymentResponse
from app.services import orders as order_service
from app.services import payments as payment_service

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/", response_model=ApiResponse[List[OrderResponse]])
async def list_orders(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """List orders, newest first, with their lines and payments."""
    query = db.query(Order)
    
    if status_filter:
        query = query.filter(Order.status == status_filter.value)
    
    orders = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()
    return {"data": orders}


@router.post("/", response_model=ApiResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Create an order; a direct sale is recorded as already paid."""
    order = order_service.create_order(db, order_data)
    return {"message": "Order created", "data": order}


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Get a specific order with its lines and payments."""
    return {"data": order_service.get_order_or_404(db, order_id)}


@router.get("/{order_id}/lines", response_model=ApiResponse[List[OrderLineResponse]])
async def get_order_lines(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    order = order_service.get_order_or_404(db, order_id)
    return {"data": order.lines}


@router.put("/{order_id}", response_model=ApiResponse[OrderResponse])
async def update_order(
    order_id: int,
    order_update: OrderUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Update notes or change status (cancel a pending order, deliver a paid one)."""
    order = order_service.update_order(db, order_id, order_update)
    return {"message": "Order updated", "data": order}


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Delete a pending or cancelled order; its products become available again."""
    order_service.delete_order(db, order_id)
    return {"message": "Order deleted"}


@router.post("/{order_id}/payment", response_model=ApiResponse[PaymentResponse], status_code=status.HTTP_201_CREATED)
async def record_order_payment(
    order_id: int,
    payment_data: PaymentBase,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Record a payment for a pending order and mark it paid."""
    payment = payment_service.record_payment(db, order_id, payment_data)
    return {"message": "Payment recorded and order marked as paid", "data": payment}
