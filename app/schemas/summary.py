"""Sales summary schemas."""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel


class SalesTotals(BaseModel):
    orders: int
    units: int
    revenue: float


class DailySales(BaseModel):
    day: date
    orders: int
    units: int
    revenue: float


class ProductSales(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    units: int
    revenue: float


class SalesSummary(BaseModel):
    """Sales over orders that are not cancelled, by day and by product."""
    totals: SalesTotals
    by_day: List[DailySales]
    by_product: List[ProductSales]
