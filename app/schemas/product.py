"""Product schemas for request/response validation."""
from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel


class ProductBoxRef(BaseModel):
    id: int
    code: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class ProductCategoryRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    """Schema for product response, including availability."""
    id: int
    name: str
    description: Optional[str] = None
    price: float
    quantity: int
    image_url: Optional[str] = None
    box_id: Optional[int] = None
    category_id: Optional[int] = None
    box: Optional[ProductBoxRef] = None
    category: Optional[ProductCategoryRef] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    sold_count: int = 0
    available: int = 0
    sold: bool = False
    is_available: bool = True

    class Config:
        from_attributes = True


class ProductStats(BaseModel):
    total: int
    sold: int
    available: int
    by_category: Dict[str, int]
    by_box: Dict[str, int]
