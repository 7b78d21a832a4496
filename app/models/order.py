"""Order model."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Order status enum."""
    PENDING = "pending"
    PAID = "paid"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    """Order model - a customer's purchase of one or more product units."""
    __tablename__ = "orders"
    
    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String(20), default=OrderStatus.PENDING.value, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    # Relationships
    customer = relationship("Customer", back_populates="orders")
    lines = relationship("OrderLine", back_populates="order", cascade="all, delete-orphan")
    payments = relationship(
        "Payment", back_populates="order", cascade="all, delete-orphan",
        order_by="desc(Payment.id)"
    )

    @property
    def total(self) -> float:
        return sum(line.subtotal for line in self.lines)


class OrderLine(Base):
    """Order line - one sold unit with its price at time of sale."""
    __tablename__ = "order_lines"
    
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)  # Nullable in case product is deleted
    product_name = Column(String(150), nullable=False)  # Store name for reference
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Float, nullable=False)  # Price at time of order
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    # Relationships
    order = relationship("Order", back_populates="lines")
    product = relationship("Product", back_populates="order_lines")

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity
