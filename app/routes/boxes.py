"""Box routes."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.auth import require_any_role, require_staff
from app.database import commit_or_raise, get_db
from app.models.user import User
from app.models.box import Box, BoxStatus
from app.models.product import Product
from app.routes.products import product_response
from app.schemas.box import BoxCreate, BoxResponse, BoxUpdate, BoxWithProducts, BoxStats
from app.schemas.common import ApiResponse, MessageResponse
from app.services.availability import sold_counts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/boxes", tags=["Boxes"])


def box_response(db: Session, box: Box, with_products: bool = False):
    """Serialize a box with unit totals computed from its products."""
    sold = sold_counts(db, [p.id for p in box.products])
    schema = BoxWithProducts if with_products else BoxResponse
    response = schema.model_validate(box)
    response.total_products = len(box.products)
    response.units_total = sum(p.quantity for p in box.products)
    response.units_sold = sum(sold.values())
    response.units_available = response.units_total - response.units_sold
    if with_products:
        response.products = [product_response(p, sold[p.id]) for p in box.products]
    return response


def get_box_or_404(db: Session, box_id: int) -> Box:
    box = db.query(Box).filter(Box.id == box_id).first()
    if not box:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Box not found"
        )
    return box


@router.get("/", response_model=ApiResponse[List[BoxResponse]])
async def list_boxes(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[BoxStatus] = Query(None, alias="status", description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """List boxes by arrival date, newest first."""
    query = db.query(Box)
    if status_filter:
        query = query.filter(Box.status == status_filter.value)
    boxes = query.order_by(Box.arrival_date.desc(), Box.id.desc()).offset(skip).limit(limit).all()
    return {"data": [box_response(db, box) for box in boxes]}


@router.get("/stats", response_model=ApiResponse[BoxStats])
async def box_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Box counts per status."""
    per_status = dict(db.query(Box.status, func.count(Box.id)).group_by(Box.status).all())
    with_products = db.query(func.count(func.distinct(Product.box_id))).filter(Product.box_id.isnot(None)).scalar()
    return {"data": {
        "total_boxes": sum(per_status.values()),
        "in_progress": per_status.get(BoxStatus.IN_PROGRESS.value, 0),
        "completed": per_status.get(BoxStatus.COMPLETED.value, 0),
        "archived": per_status.get(BoxStatus.ARCHIVED.value, 0),
        "boxes_with_products": with_products or 0,
    }}


@router.post("/", response_model=ApiResponse[BoxResponse], status_code=status.HTTP_201_CREATED)
async def create_box(
    box_data: BoxCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Create a new box."""
    # Check if code is unique
    existing = db.query(Box).filter(Box.code == box_data.code).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A box with this code already exists"
        )
    
    db_box = Box(**box_data.model_dump(exclude={"status"}), status=box_data.status.value)
    db.add(db_box)
    commit_or_raise(db, "create box")
    db.refresh(db_box)
    logger.info("Created box %s (%s)", db_box.id, db_box.code)
    return {"message": "Box created", "data": box_response(db, db_box)}


@router.get("/{box_id}", response_model=ApiResponse[BoxWithProducts])
async def get_box(
    box_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Get a specific box with its products."""
    box = get_box_or_404(db, box_id)
    return {"data": box_response(db, box, with_products=True)}


@router.put("/{box_id}", response_model=ApiResponse[BoxResponse])
async def update_box(
    box_id: int,
    box_update: BoxUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Update a box."""
    box = get_box_or_404(db, box_id)
    
    # Check if new code is unique
    if box_update.code and box_update.code != box.code:
        existing = db.query(Box).filter(Box.code == box_update.code).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A box with this code already exists"
            )
    
    update_data = box_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field in ("code", "status") and value is None:
            continue
        setattr(box, field, value.value if isinstance(value, BoxStatus) else value)
    
    commit_or_raise(db, "update box")
    db.refresh(box)
    return {"message": "Box updated", "data": box_response(db, box)}


@router.delete("/{box_id}", response_model=MessageResponse)
async def delete_box(
    box_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Delete a box. Only empty boxes can be deleted."""
    box = get_box_or_404(db, box_id)
    
    # Check if box has products
    if box.products:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Cannot delete a box that has products assigned",
                "details": {"total_products": len(box.products)},
            }
        )
    
    db.delete(box)
    commit_or_raise(db, "delete box")
    logger.info("Deleted box %s", box_id)
    return {"message": "Box deleted"}
