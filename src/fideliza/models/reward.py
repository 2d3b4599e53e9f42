"""Reward catalog model."""

import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow


class RewardCategory(str, enum.Enum):
    """Catalog grouping; also the prefix of redemption codes."""

    DISCOUNT = "discount"
    PRODUCT = "product"
    SERVICE = "service"
    CASHBACK = "cashback"
    OTHER = "other"


class RewardType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED_VALUE = "fixed_value"
    FREE_ITEM = "free_item"
    VOUCHER = "voucher"


def _enum_values(members):
    return [member.value for member in members]


class Reward(Base):
    """Redeemable reward offered by a store, optionally capped and time-boxed."""

    __tablename__ = "rewards"
    __table_args__ = (
        CheckConstraint("points_required > 0", name="rewards_points_required_positive"),
        CheckConstraint("current_redemptions >= 0", name="rewards_current_redemptions_non_negative"),
        CheckConstraint(
            "max_redemptions IS NULL OR current_redemptions <= max_redemptions",
            name="rewards_redemption_cap",
        ),
    )

    reward_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    store_id = Column(UUID(as_uuid=True), ForeignKey("stores.store_id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String)
    points_required = Column(Integer, nullable=False)
    category = Column(
        Enum(RewardCategory, name="reward_category", values_callable=_enum_values),
        nullable=False,
        default=RewardCategory.OTHER,
    )
    reward_type = Column(
        Enum(RewardType, name="reward_type", values_callable=_enum_values),
        nullable=False,
        default=RewardType.VOUCHER,
    )
    reward_value = Column(String)
    max_redemptions = Column(Integer)
    current_redemptions = Column(Integer, nullable=False, default=0)
    valid_from = Column(DateTime, default=utcnow, nullable=False)
    valid_until = Column(DateTime)
    never_expires = Column(Boolean, nullable=False, default=False)
    minimum_purchase = Column(Integer)
    terms_and_conditions = Column(String)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    store = relationship("Store", back_populates="rewards")
    redemptions = relationship("Redemption", back_populates="reward", passive_deletes=True)
