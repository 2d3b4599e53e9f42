"""Pydantic schemas for the points ledger."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import PointTransactionType


class PointsAdjustment(BaseModel):
    """Operator request to credit or debit a customer."""

    points: int = Field(..., gt=0, description="Magnitude; the type decides the sign.")
    type: PointTransactionType = PointTransactionType.EARNED
    description: Optional[str] = Field(None, max_length=200)


class PointsBalance(BaseModel):
    customer_id: UUID
    new_balance: int = Field(..., ge=0)


class PointTransactionRead(BaseModel):
    """Ledger entry as shown in a customer's history."""

    model_config = ConfigDict(from_attributes=True)

    transaction_id: UUID
    transaction_type: PointTransactionType
    points: int
    requested_points: int
    description: Optional[str]
    reference_id: Optional[UUID]
    created_at: datetime
