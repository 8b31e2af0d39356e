import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Boolean, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Bill(Base):
    __tablename__ = "bills"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(String, ForeignKey("units.id", ondelete="SET NULL"), nullable=True, index=True)
    property = relationship("Property", back_populates="bills")
    unit = relationship("Unit", back_populates="bills")
    payments = relationship("Payment", back_populates="bill", cascade="all, delete-orphan")

    # rent_amount > 0 marks a rent bill; 0 marks a maintenance / service fee bill
    rent_amount = Column(Numeric(14, 2), nullable=False, default=0)

    # Metered utilities
    electricity_previous_reading = Column(Numeric(12, 2), nullable=True)
    electricity_current_reading = Column(Numeric(12, 2), nullable=True)
    electricity_consumption = Column(Numeric(12, 2), nullable=True)
    electricity_rate = Column(Numeric(12, 2), nullable=True)
    uses_tiered_pricing = Column(Boolean, nullable=False, default=False)
    electricity_tier_details = Column(JSON, nullable=True)  # [{"limit": 50, "rate": 1984}, ...]
    electricity_amount = Column(Numeric(14, 2), nullable=True)

    water_previous_reading = Column(Numeric(12, 2), nullable=True)
    water_current_reading = Column(Numeric(12, 2), nullable=True)
    water_consumption = Column(Numeric(12, 2), nullable=True)
    water_rate = Column(Numeric(12, 2), nullable=True)
    water_amount = Column(Numeric(14, 2), nullable=True)

    additional_fees = Column(JSON, nullable=True)  # [{"name": ..., "amount": ...}]
    total_amount = Column(Numeric(14, 2), nullable=False, default=0)

    priority = Column(String, nullable=False, default="medium")
    due_date = Column(DateTime(timezone=True), nullable=False, index=True)
    is_paid = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)
