"""Store (tenant) model."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class Store(Base):
    """A tenant owning customers, rewards, redemptions and ledger rows."""

    __tablename__ = "stores"
    __table_args__ = (UniqueConstraint("slug", name="stores_slug_unique"),)

    store_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    customers = relationship("Customer", back_populates="store", cascade="all, delete-orphan", passive_deletes=True)
    rewards = relationship("Reward", back_populates="store", cascade="all, delete-orphan", passive_deletes=True)
    redemptions = relationship(
        "Redemption", back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )
    point_transactions = relationship(
        "PointTransaction", back_populates="store", cascade="all, delete-orphan", passive_deletes=True
    )
