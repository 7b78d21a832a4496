"""Box schemas for request/response validation."""
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from app.models.box import BoxStatus


class BoxBase(BaseModel):
    """Base box schema."""
    code: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    arrival_date: Optional[date] = None
    supplier: Optional[str] = None
    total_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class BoxCreate(BoxBase):
    """Schema for creating a box."""
    status: BoxStatus = BoxStatus.IN_PROGRESS


class BoxUpdate(BaseModel):
    """Schema for updating a box."""
    code: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    arrival_date: Optional[date] = None
    supplier: Optional[str] = None
    total_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    status: Optional[BoxStatus] = None


class BoxResponse(BoxBase):
    """Schema for box response, with unit counts of its products."""
    id: int
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    total_products: int = 0
    units_total: int = 0
    units_sold: int = 0
    units_available: int = 0
    
    class Config:
        from_attributes = True


class BoxWithProducts(BoxResponse):
    """Schema for box with products."""
    products: List["ProductResponse"] = []


class BoxStats(BaseModel):
    total_boxes: int
    in_progress: int
    completed: int
    archived: int
    boxes_with_products: int


# Forward reference for circular import
from app.schemas.product import ProductResponse
BoxWithProducts.model_rebuild()
