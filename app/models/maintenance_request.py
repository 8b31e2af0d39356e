import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    property_id = Column(String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(String, ForeignKey("units.id", ondelete="SET NULL"), nullable=True, index=True)
    property = relationship("Property", back_populates="maintenance_requests")
    unit = relationship("Unit")

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    priority = Column(String, nullable=False, default="MEDIUM")  # HIGH / MEDIUM / LOW
    status = Column(String, nullable=False, default="PENDING")  # PENDING / IN_PROGRESS / SCHEDULED / COMPLETED
    scheduled_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)
