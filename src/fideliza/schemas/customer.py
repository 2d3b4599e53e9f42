"""Pydantic schemas for customer endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StoreSummary(BaseModel):
    """Lightweight projection of store details."""

    model_config = ConfigDict(from_attributes=True)

    store_id: UUID
    name: str
    slug: str


class CustomerRead(BaseModel):
    """Customer response payload."""

    model_config = ConfigDict(from_attributes=True)

    customer_id: UUID
    store_id: UUID
    name: str
    email: Optional[str]
    phone: Optional[str]
    total_points: int
    is_active: bool
    created_at: datetime


class _ContactMixin(BaseModel):
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, min_length=10, max_length=15)

    @model_validator(mode="after")
    def _require_contact(self):
        if not (self.email or self.phone):
            raise ValueError("Email or phone is required.")
        if self.email and "@" not in self.email:
            raise ValueError("Invalid email.")
        return self


class CustomerLogin(_ContactMixin):
    """Request body for a customer logging in at a store."""

    store_slug: str = Field(..., min_length=1)


class CustomerCreate(_ContactMixin):
    """Request body for store-side customer registration."""

    name: str = Field(..., min_length=1, max_length=100)


class CustomerSession(BaseModel):
    """Response returned after a customer login."""

    customer: CustomerRead
    store: StoreSummary
