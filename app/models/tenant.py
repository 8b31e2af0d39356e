import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    # Landlord who manages this tenant
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    tenancies = relationship("TenantUnit", back_populates="tenant", cascade="all, delete-orphan")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TenantUnit(Base):
    """A tenant's contract on one unit."""
    __tablename__ = "tenant_units"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    tenant_id = Column(String, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(String, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant = relationship("Tenant", back_populates="tenancies")
    unit = relationship("Unit", back_populates="tenancies")

    contract_start_date = Column(DateTime(timezone=True), nullable=True)
    contract_end_date = Column(DateTime(timezone=True), nullable=True, index=True)
    contract_status = Column(String, nullable=False, default="ACTIVE")  # ACTIVE / EXPIRED / TERMINATED

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
