"""Pydantic schemas for redemption workflows."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import RedemptionStatus

REDEMPTION_INSTRUCTIONS = "Show this code at the store to use your reward."


class RedemptionCreate(BaseModel):
    """Incoming payload for redeeming a reward."""

    reward_id: UUID


class RedemptionRead(BaseModel):
    """Represents a redemption record."""

    model_config = ConfigDict(from_attributes=True)

    redemption_id: UUID
    customer_id: UUID
    reward_id: UUID
    code: str
    points_used: int
    status: RedemptionStatus
    redeemed_at: datetime
    completed_at: Optional[datetime]
    cancelled_at: Optional[datetime]


class RedemptionReceipt(BaseModel):
    """Response returned after redeeming a reward."""

    redemption: RedemptionRead
    code: str
    reward: str
    points_used: int
    new_balance: int = Field(..., ge=0, description="Customer balance after this redemption.")
    instructions: str = REDEMPTION_INSTRUCTIONS


class CodeValidation(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class ValidatedRedemption(BaseModel):
    """Enriched view returned to the operator after a code is accepted."""

    redemption_id: UUID
    code: str
    status: RedemptionStatus
    customer: str
    reward: str
    description: Optional[str]
    points_used: int
    redeemed_at: datetime
    completed_at: Optional[datetime]


class CancellationReceipt(BaseModel):
    redemption: RedemptionRead
    refunded_points: int
    new_balance: int = Field(..., ge=0)


class RedemptionHistoryItem(BaseModel):
    """Customer-facing history row."""

    redemption_id: UUID
    code: str
    reward: str
    points_used: int
    status: RedemptionStatus
    redeemed_at: datetime
    completed_at: Optional[datetime]
