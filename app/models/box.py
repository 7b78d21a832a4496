"""Box model."""
import enum
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class BoxStatus(str, enum.Enum):
    """Box lifecycle states."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Box(Base):
    """Box model - a received shipment whose contents become products."""
    __tablename__ = "boxes"
    
    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(100), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    arrival_date = Column(Date, nullable=True)
    supplier = Column(String(150), nullable=True)
    total_cost = Column(Float, nullable=True, default=None)
    notes = Column(Text, nullable=True)
    status = Column(String(20), default=BoxStatus.IN_PROGRESS.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    # Relationships
    products = relationship("Product", back_populates="box")
