"""Customer domain model."""

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow

DEFAULT_CUSTOMER_NAME = "Cliente"


class Customer(Base):
    """A store's loyalty member; `total_points` caches the ledger sum."""

    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("store_id", "email", name="customers_store_email_unique"),
        UniqueConstraint("store_id", "phone", name="customers_store_phone_unique"),
        CheckConstraint("email IS NOT NULL OR phone IS NOT NULL", name="customers_contact_required"),
        CheckConstraint("total_points >= 0", name="customers_total_points_non_negative"),
    )

    customer_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    store_id = Column(UUID(as_uuid=True), ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, default=DEFAULT_CUSTOMER_NAME)
    email = Column(String)
    phone = Column(String)
    total_points = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    store = relationship("Store", back_populates="customers")
    point_transactions = relationship("PointTransaction", back_populates="customer", passive_deletes=True)
    redemptions = relationship("Redemption", back_populates="customer", passive_deletes=True)
