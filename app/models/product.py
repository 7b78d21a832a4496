"""Product model."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Product(Base):
    """Product model - sellable stock, optionally assigned to a box."""
    __tablename__ = "products"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    image_url = Column(String(500), nullable=True)
    box_id = Column(Integer, ForeignKey("boxes.id"), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    # Relationships
    box = relationship("Box", back_populates="products")
    category = relationship("Category", back_populates="products")
    order_lines = relationship("OrderLine", back_populates="product")
