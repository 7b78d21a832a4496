"""Dashboard schemas."""
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel


class DashboardTotals(BaseModel):
    customers: int
    products: int
    orders: int
    revenue: float


class TopProduct(BaseModel):
    product_id: int
    name: str
    units_sold: int


class RecentOrder(BaseModel):
    id: int
    status: str
    created_at: datetime
    customer_name: Optional[str] = None
    total: float


class DashboardResponse(BaseModel):
    totals: DashboardTotals
    orders_by_status: Dict[str, int]
    top_products: List[TopProduct]
    recent_orders: List[RecentOrder]
