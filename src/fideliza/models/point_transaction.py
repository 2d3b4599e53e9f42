"""Points ledger model capturing balance movements."""

import enum
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class PointTransactionType(str, enum.Enum):
    """Ledger event classification."""

    EARNED = "earned"
    REDEEMED = "redeemed"
    EXPIRED = "expired"
    ADJUSTED = "adjusted"


class PointTransaction(Base):
    """Immutable ledger of point deltas for each customer.

    ``points`` is the delta applied to the balance and ``requested_points`` the
    delta the caller asked for; they differ only when a debit hit the zero floor.
    """

    __tablename__ = "point_transactions"
    __table_args__ = (
        CheckConstraint("requested_points <> 0", name="point_transactions_requested_non_zero"),
        CheckConstraint(
            "(requested_points > 0 AND points = requested_points) "
            "OR (requested_points < 0 AND points <= 0 AND points >= requested_points)",
            name="point_transactions_applied_within_requested",
        ),
    )

    transaction_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_id = Column(
        UUID(as_uuid=True), ForeignKey("customers.customer_id", ondelete="CASCADE"), nullable=False, index=True
    )
    store_id = Column(UUID(as_uuid=True), ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_type = Column(
        Enum(
            PointTransactionType,
            name="point_transaction_type",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    points = Column(Integer, nullable=False)
    requested_points = Column(Integer, nullable=False)
    description = Column(String)
    reference_id = Column(UUID(as_uuid=True), ForeignKey("redemptions.redemption_id", ondelete="SET NULL"))
    created_by = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="point_transactions")
    store = relationship("Store", back_populates="point_transactions")
    redemption = relationship("Redemption", back_populates="point_transactions")
