"""Category routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.auth import require_any_role, require_staff
from app.database import commit_or_raise, get_db
from app.models.category import Category
from app.models.user import User
from app.schemas.category import CategoryCreate, CategoryResponse
from app.schemas.common import ApiResponse

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=ApiResponse[List[CategoryResponse]])
async def list_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """List all categories."""
    return {"data": db.query(Category).order_by(Category.name).all()}


@router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
async def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )
    return {"data": category}


@router.post("/", response_model=ApiResponse[CategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Create a new category."""
    existing = db.query(Category).filter(Category.name == category_data.name).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category name already exists"
        )

    category = Category(**category_data.model_dump())
    db.add(category)
    commit_or_raise(db, "create category")
    db.refresh(category)
    return {"message": "Category created", "data": category}
