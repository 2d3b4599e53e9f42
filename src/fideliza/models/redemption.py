"""Redemption domain model."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class RedemptionStatus(str, enum.Enum):
    """Possible redemption states. ``completed`` and ``cancelled`` are terminal."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Redemption(Base):
    """A single claim of a reward, proven at the counter by its code."""

    __tablename__ = "redemptions"
    __table_args__ = (UniqueConstraint("store_id", "code", name="redemptions_store_code_unique"),)

    redemption_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_id = Column(
        UUID(as_uuid=True), ForeignKey("customers.customer_id", ondelete="CASCADE"), nullable=False, index=True
    )
    store_id = Column(UUID(as_uuid=True), ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False)
    reward_id = Column(UUID(as_uuid=True), ForeignKey("rewards.reward_id", ondelete="CASCADE"), nullable=False)
    points_used = Column(Integer, nullable=False)
    status = Column(
        SAEnum(
            RedemptionStatus,
            name="redemption_status",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        default=RedemptionStatus.PENDING,
    )
    code = Column(String, nullable=False)
    notes = Column(String)
    redeemed_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime)
    cancelled_at = Column(DateTime)

    customer = relationship("Customer", back_populates="redemptions")
    store = relationship("Store", back_populates="redemptions")
    reward = relationship("Reward", back_populates="redemptions")
    point_transactions = relationship("PointTransaction", back_populates="redemption")
