"""Pydantic schemas for the reward catalog."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import RewardCategory, RewardType


class RewardCreate(BaseModel):
    """Request body for adding a reward."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    points_required: int = Field(..., gt=0)
    category: RewardCategory = RewardCategory.OTHER
    reward_type: RewardType = RewardType.VOUCHER
    reward_value: Optional[str] = Field(None, max_length=100)
    max_redemptions: Optional[int] = Field(None, gt=0, description="Omit for unlimited redemptions.")
    valid_until: Optional[datetime] = None
    never_expires: bool = False
    minimum_purchase: Optional[int] = Field(None, ge=0, description="Minimum purchase in cents.")
    terms_and_conditions: Optional[str] = Field(None, max_length=1000)


class RewardUpdate(BaseModel):
    is_active: bool


class RewardRead(BaseModel):
    """Reward response payload."""

    model_config = ConfigDict(from_attributes=True)

    reward_id: UUID
    store_id: UUID
    name: str
    description: Optional[str]
    points_required: int
    category: RewardCategory
    reward_type: RewardType
    reward_value: Optional[str]
    max_redemptions: Optional[int]
    current_redemptions: int
    valid_from: datetime
    valid_until: Optional[datetime]
    never_expires: bool
    minimum_purchase: Optional[int]
    terms_and_conditions: Optional[str]
    is_active: bool
    available: bool = Field(False, description="Whether the reward can be redeemed right now.")
