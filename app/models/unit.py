import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Unit(Base):
    __tablename__ = "units"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    # Foreign key to Property
    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    property = relationship("Property", back_populates="units")

    name = Column(String, nullable=False)  # "A101", "Room 3", ...
    rent_amount = Column(Numeric(14, 2), nullable=True)  # Monthly rent

    tenancies = relationship("TenantUnit", back_populates="unit", cascade="all, delete-orphan")
    bills = relationship("Bill", back_populates="unit")

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)
