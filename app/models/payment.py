import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, func
from sqlalchemy.orm import relationship

from app.core.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))

    bill_id = Column(String, ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(String, ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True, index=True)

    amount = Column(Numeric(14, 2), nullable=False)
    payment_method = Column(String, nullable=True)  # cash / bank_transfer / card
    status = Column(String, nullable=False, default="completed")  # completed / pending / cancelled

    payment_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    bill = relationship("Bill", back_populates="payments")
