"""Store dashboard aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..core.security import Principal
from ..models import Customer, Redemption, RedemptionStatus, Reward, Store
from ..utils.datetime import to_naive_utc, utcnow
from .tenancy import get_accessible_store


@dataclass
class StoreStats:
    store: Store
    total_customers: int
    active_rewards: int
    monthly_redemptions: int
    points_in_circulation: int


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def store_stats(
    session: Session,
    *,
    principal: Principal,
    store_id: UUID,
    now: Optional[datetime] = None,
) -> StoreStats:
    """Headline numbers for a store: customers, live rewards, redemptions this
    calendar month (UTC, cancelled ones excluded) and the sum of balances."""

    store = get_accessible_store(session, principal, store_id)
    since = month_start(to_naive_utc(now) or utcnow())

    customers_stmt = select(
        func.count(Customer.customer_id),
        func.coalesce(func.sum(Customer.total_points), 0),
    ).where(Customer.store_id == store_id)
    total_customers, points_in_circulation = session.execute(customers_stmt).one()

    active_rewards = session.execute(
        select(func.count(Reward.reward_id)).where(Reward.store_id == store_id, Reward.is_active.is_(True))
    ).scalar_one()

    monthly_redemptions = session.execute(
        select(func.count(Redemption.redemption_id)).where(
            Redemption.store_id == store_id,
            Redemption.redeemed_at >= since,
            Redemption.status != RedemptionStatus.CANCELLED,
        )
    ).scalar_one()

    return StoreStats(
        store=store,
        total_customers=total_customers,
        active_rewards=active_rewards,
        monthly_redemptions=monthly_redemptions,
        points_in_circulation=int(points_in_circulation),
    )
