"""Payment schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class PaymentBase(BaseModel):
    """Fields supplied when recording a payment."""
    amount: float = Field(..., gt=0)
    method: str = Field(..., min_length=1, max_length=50)
    proof_url: Optional[str] = None


class PaymentCreate(PaymentBase):
    """Schema for recording a payment against an order."""
    order_id: int


class PaymentUpdate(BaseModel):
    """Only amount, method and proof may change; order status is untouched."""
    amount: Optional[float] = Field(None, gt=0)
    method: Optional[str] = Field(None, min_length=1, max_length=50)
    proof_url: Optional[str] = None


class PaymentResponse(PaymentBase):
    id: int
    order_id: int
    created_at: datetime

    class Config:
        from_attributes = True
