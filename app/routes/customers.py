"""Customer routes."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.auth import require_any_role, require_staff
from app.database import commit_or_raise, get_db
from app.models.customer import Customer
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.customer import CustomerCreate, CustomerResponse

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("/", response_model=ApiResponse[List[CustomerResponse]])
async def list_customers(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """List all customers."""
    customers = db.query(Customer).order_by(Customer.name).offset(skip).limit(limit).all()
    return {"data": customers}


@router.get("/{customer_id}", response_model=ApiResponse[CustomerResponse])
async def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return {"data": customer}


@router.post("/", response_model=ApiResponse[CustomerResponse], status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Create a new customer."""
    customer = Customer(**customer_data.model_dump())
    db.add(customer)
    commit_or_raise(db, "create customer")
    db.refresh(customer)
    return {"message": "Customer created", "data": customer}
