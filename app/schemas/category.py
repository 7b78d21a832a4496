"""Category schemas."""
from typing import Optional
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryResponse(CategoryCreate):
    id: int

    class Config:
        from_attributes = True
