"""Payment routes."""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import require_any_role, require_staff
from app.database import get_db
from app.models.payment import Payment
from app.models.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.payment import PaymentBase, PaymentCreate, PaymentResponse, PaymentUpdate
from app.services import payments as payment_service
from app.services.orders import get_order_or_404

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("/", response_model=ApiResponse[List[PaymentResponse]])
async def list_payments(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """List payments, newest first."""
    payments = (
        db.query(Payment)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {"data": payments}


@router.get("/by-order/{order_id}", response_model=ApiResponse[List[PaymentResponse]])
async def list_order_payments(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """List the payments of one order, newest first."""
    order = get_order_or_404(db, order_id)
    return {"data": order.payments}


@router.get("/{payment_id}", response_model=ApiResponse[PaymentResponse])
async def get_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    return {"data": payment_service.get_payment_or_404(db, payment_id)}


@router.post("/", response_model=ApiResponse[PaymentResponse], status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Record a payment for a pending order and mark it paid."""
    payment = payment_service.record_payment(
        db, payment_data.order_id, PaymentBase(**payment_data.model_dump(exclude={"order_id"}))
    )
    return {"message": "Payment recorded and order marked as paid", "data": payment}


@router.put("/{payment_id}", response_model=ApiResponse[PaymentResponse])
async def update_payment(
    payment_id: int,
    payment_update: PaymentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Adjust amount, method or proof of a payment."""
    payment = payment_service.update_payment(db, payment_id, payment_update)
    return {"message": "Payment updated", "data": payment}


@router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Delete a payment; its order goes back to pending."""
    payment_service.delete_payment(db, payment_id)
    return {"message": "Payment deleted. The order is pending again."}
