"""Product routes."""
import logging
from collections import Counter
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.auth import require_any_role, require_staff
from app.database import commit_or_raise, get_db
from app.models.box import Box
from app.models.category import Category
from app.models.product import Product
from app.models.user import User
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.product import ProductResponse, ProductStats
from app.services.availability import sold_count, sold_counts, sold_subquery
from app.services.media import MediaService, get_media_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


def product_response(product: Product, sold: int) -> ProductResponse:
    """Serialize a product together with its availability."""
    response = ProductResponse.model_validate(product)
    response.sold_count = sold
    response.available = product.quantity - sold
    response.sold = sold > 0
    response.is_available = response.available > 0
    return response


def get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )
    return product


def _check_references(db: Session, box_id: Optional[int], category_id: Optional[int]) -> None:
    if box_id is not None and not db.query(Box).filter(Box.id == box_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Box not found"
        )
    if category_id is not None and not db.query(Category).filter(Category.id == category_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )


def _check_duplicate(db: Session, name: str, price: float, box_id: Optional[int], exclude_id: Optional[int] = None) -> None:
    query = db.query(Product).filter(
        Product.name == name,
        Product.price == price,
        Product.box_id == box_id
    )
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A product with the same name and price already exists in this box"
        )


async def _upload(media: MediaService, image: Optional[UploadFile]) -> Optional[str]:
    if image is None or not image.filename:
        return None
    content = await image.read()
    if not content:
        return None
    return await media.upload_image(content, image.filename)


@router.get("/", response_model=ApiResponse[List[ProductResponse]])
async def list_products(
    skip: int = 0,
    limit: int = 100,
    box_id: Optional[int] = Query(None, description="Filter by box"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    search: Optional[str] = Query(None, description="Search by name or description"),
    available_only: bool = Query(False, description="Only products with units left"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """List products, newest first, with their availability."""
    query = db.query(Product)
    
    if box_id:
        query = query.filter(Product.box_id == box_id)
    if category_id:
        query = query.filter(Product.category_id == category_id)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            (Product.name.ilike(search_term)) |
            (Product.description.ilike(search_term))
        )
    if available_only:
        sold_sub = sold_subquery(db)
        query = query.outerjoin(sold_sub, sold_sub.c.product_id == Product.id).filter(
            Product.quantity - func.coalesce(sold_sub.c.sold, 0) > 0
        )
    
    products = query.order_by(Product.created_at.desc(), Product.id.desc()).offset(skip).limit(limit).all()
    sold = sold_counts(db, [p.id for p in products])
    return {"data": [product_response(p, sold[p.id]) for p in products]}


@router.get("/stats", response_model=ApiResponse[ProductStats])
async def product_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Counts of sold/available products grouped by category and box."""
    products = db.query(Product).all()
    sold = sold_counts(db, [p.id for p in products])

    by_category = Counter(p.category.name if p.category else "Uncategorized" for p in products)
    by_box = Counter(p.box.code if p.box else "No box" for p in products)

    return {"data": {
        "total": len(products),
        "sold": sum(1 for p in products if sold[p.id] > 0),
        "available": sum(1 for p in products if p.quantity - sold[p.id] > 0),
        "by_category": dict(by_category),
        "by_box": dict(by_box),
    }}


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """Get a specific product."""
    product = get_product_or_404(db, product_id)
    return {"data": product_response(product, sold_count(db, product.id))}


@router.post("/", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    name: str = Form(..., min_length=1),
    price: float = Form(..., ge=0),
    description: Optional[str] = Form(None),
    quantity: int = Form(1, ge=1),
    box_id: Optional[int] = Form(None),
    category_id: Optional[int] = Form(None),
    image_url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service),
    current_user: User = Depends(require_staff)
):
    """Create a product, uploading its image when a file is attached."""
    _check_references(db, box_id, category_id)
    _check_duplicate(db, name, price, box_id)

    uploaded_url = await _upload(media, image)

    product = Product(
        name=name,
        description=description,
        price=price,
        quantity=quantity,
        box_id=box_id,
        category_id=category_id,
        image_url=uploaded_url or image_url
    )
    db.add(product)
    commit_or_raise(db, "create product")
    db.refresh(product)
    logger.info("Created product %s '%s'", product.id, product.name)
    return {"message": "Product created", "data": product_response(product, 0)}


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: int,
    name: Optional[str] = Form(None, min_length=1),
    price: Optional[float] = Form(None, ge=0),
    description: Optional[str] = Form(None),
    quantity: Optional[int] = Form(None, ge=1),
    box_id: Optional[int] = Form(None),
    category_id: Optional[int] = Form(None),
    clear_box: bool = Form(False, description="Unassign the product from its box"),
    clear_category: bool = Form(False, description="Unassign the product from its category"),
    image_url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service),
    current_user: User = Depends(require_staff)
):
    """Update a product. Products with sold units cannot be edited.

    Omitted fields are left unchanged; `clear_box` and `clear_category` remove
    the assignment.
    """
    product = get_product_or_404(db, product_id)

    sold = sold_count(db, product.id)
    if sold > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Cannot edit a product that has already been sold", "details": {"sold_count": sold}}
        )

    _check_references(db, box_id, category_id)
    new_name = name if name is not None else product.name
    new_price = price if price is not None else product.price
    if clear_box:
        new_box_id = None
    else:
        new_box_id = box_id if box_id is not None else product.box_id
    _check_duplicate(db, new_name, new_price, new_box_id, exclude_id=product.id)

    uploaded_url = await _upload(media, image)

    product.name = new_name
    product.price = new_price
    if quantity is not None:
        product.quantity = quantity
    product.box_id = new_box_id
    if description is not None:
        product.description = description
    if clear_category:
        product.category_id = None
    elif category_id is not None:
        product.category_id = category_id
    if uploaded_url or image_url is not None:
        product.image_url = uploaded_url or image_url

    commit_or_raise(db, "update product")
    db.refresh(product)
    return {"message": "Product updated", "data": product_response(product, 0)}


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Delete a product. Products with sold units cannot be deleted."""
    product = get_product_or_404(db, product_id)

    sold = sold_count(db, product.id)
    if sold > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Cannot delete a product that has already been sold", "details": {"sold_count": sold}}
        )

    db.delete(product)
    commit_or_raise(db, "delete product")
    logger.info("Deleted product %s", product_id)
    return {"message": "Product deleted"}
