import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    # Owner (landlord)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    address = Column(String, nullable=True)

    # APARTMENT / HOUSE / COMMERCIAL / OFFICE / WAREHOUSE
    type = Column(String, nullable=True, index=True)

    # Reverse relationships - ONE property has MANY units, bills, maintenance requests
    units = relationship("Unit", back_populates="property", cascade="all, delete-orphan")
    bills = relationship("Bill", back_populates="property", cascade="all, delete-orphan")
    maintenance_requests = relationship(
        "MaintenanceRequest", back_populates="property", cascade="all, delete-orphan"
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
