"""Order schemas."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from app.models.order import OrderStatus
from app.schemas.payment import PaymentBase, PaymentResponse


class OrderLineCreate(BaseModel):
    """One unit of a product, sold at the given price."""
    product_id: int
    unit_price: float = Field(..., ge=0)


class OrderLineResponse(BaseModel):
    """Response schema for order lines."""
    id: int
    order_id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    unit_price: float
    subtotal: float
    created_at: datetime

    class Config:
        from_attributes = True


class OrderCreate(BaseModel):
    """Schema for creating an order."""
    customer_id: int
    lines: List[OrderLineCreate] = Field(..., min_length=1)
    notes: Optional[str] = None
    direct_sale: bool = False
    payment: Optional[PaymentBase] = None


class OrderUpdate(BaseModel):
    """Schema for updating an order."""
    status: Optional[OrderStatus] = None
    notes: Optional[str] = None


class OrderResponse(BaseModel):
    """Response schema for orders."""
    id: int
    customer_id: int
    notes: Optional[str] = None
    status: str
    total: float
    created_at: datetime
    updated_at: Optional[datetime] = None
    lines: List[OrderLineResponse] = []
    payments: List[PaymentResponse] = []
    
    class Config:
        from_attributes = True
