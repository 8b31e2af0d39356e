from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.sql import func
from app.core.database import Base


class User(Base):
    __tablename__ = "users"

    # Same id as the `sub` claim of the user's bearer token
    id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=True, index=True)

    preferred_currency = Column(String, nullable=False, default="VND")  # VND / USD
    auto_convert = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
