"""Store dashboard response schemas."""

from pydantic import BaseModel, Field

from .customer import StoreSummary


class StoreStatsRead(BaseModel):
    """Aggregated store figures."""

    total_customers: int = Field(..., ge=0)
    active_rewards: int = Field(..., ge=0)
    monthly_redemptions: int = Field(..., ge=0, description="Redemptions since the start of the current UTC month.")
    points_in_circulation: int = Field(..., ge=0, description="Sum of all customer balances.")


class StoreDashboard(BaseModel):
    store: StoreSummary
    stats: StoreStatsRead
